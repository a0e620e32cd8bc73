"""Static reference data: chokepoints, icebreakers, waterways and lake centres."""

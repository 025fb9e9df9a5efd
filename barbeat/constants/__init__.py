"""Constants for barbeat.

- ``barbeat.constants.velocity`` - MIDI velocity defaults and limits
- ``barbeat.constants.pulses`` - Tick resolution used when converting beats to MIDI time
- ``barbeat.constants.durations`` - Default register values for duration and probability
"""

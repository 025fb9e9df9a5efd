"""
barbeat - a compact text notation for MIDI note sequences.

bar|beat notation describes notes by *where* they start rather than by
stepping through time. Pitches are collected, then placed by a time position;
setters change velocity, duration and probability for everything that
follows:

    v90 t0.5 C3 E3 G3 1|1 |3     # a C major chord on beats 1 and 3 of bar 1
    v60-100 C1 |2 |4             # a bass note with a velocity range
    D1 2|1,3 t0.25 F#1 |1x4@0.5  # a beat list, then a four-note repeat
    @2=                          # bar 2 is a copy of bar 1
    @5=1-2                       # bars 5 and 6 copy bars 1 and 2
    @7-14=1-2                    # bars 7 to 14 repeat bars 1 and 2
    @clear                       # later copies only see bars placed from here on

Parsing returns the note events plus a list of warnings for anything that
looks unintended but doesn't stop the parse (a time position with no
pitches, pitches never placed, copying an empty bar, a setter nothing used).
Invalid input raises a `BarBeatError`.

Minimal example:

    ```python
    import barbeat

    result = barbeat.parse("C3 E3 G3 1|1", time_signature="4/4")

    for event in result.events:
        print(event.name, event.start, event.velocity)

    for warning in result.warnings:
        print("warning:", warning)
    ```

Package-level exports: ``parse``, ``format_notation``, ``ParseResult``,
``NoteEvent``, ``BarBeat``, ``TimeSignature``, ``ParserConfig``,
``BarBeatError``.
"""

import barbeat.config
import barbeat.errors
import barbeat.events
import barbeat.formatter
import barbeat.interpreter
import barbeat.timing


parse = barbeat.interpreter.parse
format_notation = barbeat.formatter.format_notation
ParseResult = barbeat.events.ParseResult
NoteEvent = barbeat.events.NoteEvent
BarBeat = barbeat.timing.BarBeat
TimeSignature = barbeat.timing.TimeSignature
ParserConfig = barbeat.config.ParserConfig
BarBeatError = barbeat.errors.BarBeatError

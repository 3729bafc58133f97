"""Annotation prompt templates.

Used by modes.py to build each mode's instruction and by request_builder.py
for the fixed system instruction.

1. SYSTEM_INSTRUCTION — sent with every analyze call.
2. Fixed mode prompts — complete instructions naming the function to call.
3. CHART_TEMPLATE / CUSTOM_TEMPLATE — take the chart criterion or the user's
   free text. Variable: {input}.
"""

from __future__ import annotations

SYSTEM_INSTRUCTION = (
    "When given a video and a query, call the relevant function only once "
    "with the appropriate timecodes and text for the video"
)

AV_CAPTIONS = """\
For each scene in this video, generate captions that describe the scene along \
with any spoken text placed in quotation marks. Place each caption into an \
object sent to set_timecodes with the timecode of the caption in the video."""

PARAGRAPH = """\
Generate a paragraph that summarizes this video. Keep it to 3 to 5 sentences. \
Place each sentence of the summary into an object sent to set_timecodes with \
the timecode of the sentence in the video."""

KEY_MOMENTS = """\
Generate bullet points for the video. Place each bullet point into an object \
sent to set_timecodes with the timecode of the bullet point in the video."""

TABLE = """\
Choose 5 key shots from this video and call set_timecodes_with_objects with \
the timecode, text description of 10 words or less, and a list of objects \
visible in the scene (with representative emojis)."""

HAIKU = """\
Generate a haiku for the video. Place each line of the haiku into an object \
sent to set_timecodes with the timecode of the line in the video. Make sure to \
follow the syllable count rules (5-7-5)."""

CHART_TEMPLATE = """\
Generate chart data for this video based on the following instructions: \
{input}. Call set_timecodes_with_numeric_values once with the list of data \
values and timecodes."""

CHART_SUB_MODES: dict[str, str] = {
    "Excitement": (
        "for each scene, estimate the level of excitement on a scale of 1 to 10"
    ),
    "Importance": (
        "for each scene, estimate the level of overall importance to the video "
        "on a scale of 1 to 10"
    ),
    "Number of people": "for each scene, count the number of people visible",
}

CUSTOM_TEMPLATE = "Call set_timecodes once using the following instructions: {input}"

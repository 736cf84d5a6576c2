"""Prompt construction for meeting summaries."""

from datetime import UTC

from meetsync.models.domain.meeting_domain import Meeting
from meetsync.services.synthetic.mock_data import calculate_duration, time_of_day

SYSTEM_PROMPT = """You are an AI assistant that generates insightful, professional meeting summaries based on calendar event metadata.

Your summaries should:
- Be concise but informative (3-5 sentences)
- Highlight the meeting's likely purpose based on title and attendees
- Mention key logistical details (duration, platform, attendees)
- Infer potential topics or outcomes based on context
- Use professional business language
- Be realistic about what can be inferred from calendar data alone

Do not:
- Make up specific discussion points or decisions
- Claim knowledge of actual meeting content
- Use overly formal or robotic language
- Simply restate the meeting title"""

MAX_LISTED_ATTENDEES = 5
MAX_DESCRIPTION_CHARS = 300


def build_summary_prompt(meeting: Meeting) -> str:
    """Metadata-only prompt: no meeting content is known."""
    start = meeting.start_datetime()
    duration = calculate_duration(start, meeting.end_datetime())

    lines = [
        "Generate a professional meeting summary based on the following calendar event:",
        "",
        f"**Meeting Title:** {meeting.title}",
    ]
    if start:
        start = start.astimezone(UTC)
        when = start.strftime("%A, %B %d, %Y at %I:%M %p").replace(" 0", " ")
        lines.append(f"**Date & Time:** {when} ({time_of_day(start)})")
    lines.append(f"**Duration:** {duration}")

    attendees = meeting.attendees
    if attendees:
        plural = "s" if len(attendees) > 1 else ""
        lines.append(f"**Attendees:** {len(attendees)} participant{plural}")
        lines.extend(f"  - {attendee.name}" for attendee in attendees[:MAX_LISTED_ATTENDEES])
        if len(attendees) > MAX_LISTED_ATTENDEES:
            lines.append(f"  - And {len(attendees) - MAX_LISTED_ATTENDEES} more...")

    if meeting.location:
        lines.append(f"**Location:** {meeting.location}")
    if meeting.meet_link:
        lines.append("**Format:** Virtual meeting (Google Meet)")

    description = meeting.description
    if description:
        ellipsis = "..." if len(description) > MAX_DESCRIPTION_CHARS else ""
        lines.append(f"**Description:** {description[:MAX_DESCRIPTION_CHARS]}{ellipsis}")

    if meeting.organizer and (meeting.organizer.name or meeting.organizer.email):
        lines.append(f"**Organized by:** {meeting.organizer.name or meeting.organizer.email}")

    lines.append("")
    lines.append(
        "Provide a concise, insightful summary that captures the likely purpose "
        "and context of this meeting."
    )
    return "\n".join(lines)

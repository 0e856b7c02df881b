"""
Prompt text for the coaching model.
"""

from app.features.runs.schemas import RunMetrics

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert running coach focused on injury prevention and performance. "
    "Always respond with valid JSON only."
)

CHAT_SYSTEM_PROMPT = (
    "You are an expert running coach. Be concise, actionable, and focus on injury "
    "prevention. Keep responses under 150 words."
)


def _km(distance_m) -> str:
    return f"{(distance_m or 0) / 1000:.1f}"


def _duration(seconds) -> str:
    seconds = int(seconds or 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def build_analysis_prompt(run: RunMetrics) -> str:
    """Prompt asking for {summary, insights, recommendations} JSON."""
    hr_note = (
        "Include heart rate zone analysis."
        if run.avg_heart_rate
        else "Note: Heart rate data not available for this run."
    )
    cadence_note = (
        "Include cadence analysis for running form."
        if run.cadence
        else "Note: Cadence data not available for this run."
    )

    return f"""Analyze this running activity and provide coaching insights:

Distance: {_km(run.distance)} km
Duration: {_duration(run.duration)}
Pace: {run.pace if run.pace is not None else 'N/A'} min/km
Average Heart Rate: {run.avg_heart_rate or 'N/A'} bpm
Cadence: {run.cadence or 'N/A'} spm
Elevation Gain: {round(run.elevation_gain or 0)}m

Provide a JSON response with:
1. "summary": A brief 2-3 sentence summary of the run quality and performance
2. "insights": Array of 2-3 insights with "title", "detail", and "type" (tip/positive/warning)
3. "recommendations": Array of 2-3 actionable recommendations with "title" and "detail"

Focus on: injury prevention, training load, pace management, and form optimization.
{hr_note}
{cadence_note}

Return ONLY valid JSON, no other text."""


def build_chat_prompt(question: str, run: RunMetrics) -> str:
    """Runner question prefixed with a one-line run context."""
    context = (
        f"Run context: {_km(run.distance)}km, {run.pace} pace, "
        f"{run.avg_heart_rate or 'N/A'} HR, {run.cadence or 'N/A'} cadence"
    )
    return f"{context}\n\nRunner's question: {question}"

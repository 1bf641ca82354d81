"""
release_generator.py
- Builds the OTT release prompt, calls the text generator and salvages a JSON
  array of releases from the free-form answer.
- Never raises: generate_releases reports failure as None, fetch_releases
  as an empty list. A parsed empty array is a success, not a failure.
"""
import json
import logging
from datetime import date
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from pydantic import ValidationError

from app.core.config import settings
from app.schemas import Release
from app.utils.timezone import local_today

logger = logging.getLogger(__name__)

GenerateFn = Callable[[str], Awaitable[str]]


def build_prompt(timeframe: str, today: date, platforms: Optional[Sequence[str]] = None) -> str:
    platforms = list(platforms or settings.ott_platforms)
    year_month = f"{today.year}-{today.month:02d}"
    if timeframe == "month":
        period = f"for the current month ({year_month})"
    else:
        period = f"for the current week ({year_month})"

    return (
        "You are an expert OTT entertainment assistant with access to current entertainment industry data.\n\n"
        f"Provide OTT movie and web series releases {period}.\n\n"
        f"Include only major platforms: {', '.join(platforms)}.\n\n"
        "REQUIREMENTS:\n"
        "- Provide realistic and believable OTT releases\n"
        "- Use dates within the requested timeframe when possible\n"
        "- If no real releases exist for the exact timeframe, provide recent or upcoming releases\n"
        "- Focus on popular and notable titles\n"
        "- Use realistic release dates (YYYY-MM-DD format)\n\n"
        "Return output strictly as a JSON array like:\n"
        "[\n"
        "  {\n"
        '    "title": "string",\n'
        '    "platform": "string",\n'
        '    "genre": "string",\n'
        '    "release_date": "YYYY-MM-DD"\n'
        "  }\n"
        "]\n"
        "Do not include any extra text or markdown. Provide at least 5-10 releases if possible.\n"
    )


def extract_json_array(text: str) -> Optional[Any]:
    """Parse the span between the first '[' and the last ']'.

    Returns None when no such span exists. json.JSONDecodeError propagates.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end < start:
        return None
    return json.loads(text[start:end + 1])


def coerce_releases(items: Any) -> List[Release]:
    """Build Release records from parsed JSON, skipping entries with no usable title."""
    if not isinstance(items, list):
        return []
    releases: List[Release] = []
    for entry in items:
        if not isinstance(entry, dict):
            continue
        title = entry.get("title")
        if title is None or not str(title).strip():
            continue
        raw_date = entry.get("release_date")
        try:
            releases.append(Release(
                title=str(title).strip(),
                platform=str(entry.get("platform") or ""),
                genre=str(entry.get("genre") or ""),
                release_date=None if raw_date is None else str(raw_date),
            ))
        except ValidationError as e:
            logger.debug(f"[OTT_GEN] Skipping malformed release entry {entry!r}: {e}")
    return releases


async def generate_releases(
    timeframe: str,
    generate: Optional[GenerateFn] = None,
    today: Optional[date] = None,
) -> Optional[List[Release]]:
    """Ask the generator for releases in the timeframe.

    Returns the parsed list (possibly empty) when a JSON array was salvaged,
    None on any generation or parsing failure. Never raises.
    """
    today = today or local_today(settings.ott_timezone)
    prompt = build_prompt(timeframe, today)

    try:
        if generate is None:
            from app.services.llm_client import get_llm_client
            generate = get_llm_client().generate

        logger.info(f"[OTT_GEN] Fetching OTT releases for {timeframe}...")
        text = await generate(prompt)

        items = extract_json_array(text or "")
        if items is None:
            logger.error("[OTT_GEN] No valid JSON array found in response")
            return None

        releases = coerce_releases(items)
        logger.info(f"[OTT_GEN] Successfully fetched {len(releases)} releases")
        return releases
    except Exception as e:
        logger.error(f"[OTT_GEN] Error fetching OTT releases: {e}")
        return None


async def fetch_releases(
    timeframe: str,
    generate: Optional[GenerateFn] = None,
    today: Optional[date] = None,
) -> List[Release]:
    """Same as generate_releases, with failures flattened to []."""
    return await generate_releases(timeframe, generate=generate, today=today) or []

"""Search actions: link bundles per search kind plus live news headlines."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote
from xml.etree import ElementTree as ET

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.parsers.search import build_query, match_intent
from core.parsers.types import ActionKind, Scalar
from core.task_executor import ExecutionResult

logger = logging.getLogger(__name__)

_HEADLINE_LIMIT = 3
_USER_AGENT = "Mozilla/5.0"
_IMAGE_STOP_WORDS = {
    "who", "what", "where", "when", "why", "how", "is", "are", "the", "a", "an", "in", "on",
    "of", "for", "to", "me", "tell", "show", "find", "search", "score", "result", "match",
    "vs", "versus",
}

Links = Sequence[Tuple[str, str]]


# ---------------------------------------------------------------------------
# HTTP session with retry/backoff for the news feed
# ---------------------------------------------------------------------------
def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": _USER_AGENT, "Accept": "*/*"})
    retry = Retry(total=3, backoff_factor=0.2, status_forcelist=[429, 500, 502, 503, 504])
    session.mount("https://", HTTPAdapter(max_retries=retry))
    session.mount("http://", HTTPAdapter(max_retries=retry))
    return session


_session: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = build_session()
    return _session


def fetch_headlines(
    query: str,
    *,
    limit: int = _HEADLINE_LIMIT,
    session: Optional[requests.Session] = None,
    lang: str = "en",
    country: str = "IN",
) -> List[Dict[str, str]]:
    """Return up to ``limit`` Google News RSS items; any failure yields ``[]``."""

    url = (
        "https://news.google.com/rss/search?q="
        f"{quote(query)}&hl={lang.lower()}&gl={country.upper()}&ceid={country.upper()}:{lang.lower()}"
    )
    http = session or _get_session()
    try:
        response = http.get(url, timeout=8, allow_redirects=True)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("News feed request failed: %s", exc)
        return []

    text = response.text
    if "<rss" not in text and "<feed" not in text:
        return []
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return []

    items: List[Dict[str, str]] = []
    for item in root.findall(".//item"):
        title = (item.findtext("title") or "").strip()
        if title:
            items.append({"title": title, "url": (item.findtext("link") or "").strip()})
        if len(items) >= limit:
            break
    return items


# ---------------------------------------------------------------------------
# Link builders
# ---------------------------------------------------------------------------
def image_url_for(query: str) -> Optional[str]:
    tags = [word for word in query.lower().split() if word not in _IMAGE_STOP_WORDS and len(word) > 2][:3]
    if not tags:
        return None
    return f"https://loremflickr.com/800/600/{quote(','.join(tags))}/all"


def _bundle(header: str, links: Links, *, footer: str = "", image_query: Optional[str] = None) -> ExecutionResult:
    lines = [header, ""]
    lines.extend(f"• {title}: {url}" for title, url in links)
    if footer:
        lines.extend(["", footer])
    return ExecutionResult(
        success=True,
        output="\n".join(lines),
        image_url=image_url_for(image_query) if image_query else None,
    )


def _q(value: str) -> str:
    return quote(value, safe="")


def web_search(query: str) -> ExecutionResult:
    return _bundle(f"🔍 *{query}*", [("Google", f"https://www.google.com/search?q={_q(query)}")], image_query=query)


def sports_search(query: str) -> ExecutionResult:
    return _bundle(
        f"🏏 *{query}*",
        [
            ("Google", f"https://www.google.com/search?q={_q(query + ' live score')}"),
            ("Cricbuzz", "https://www.cricbuzz.com/cricket-match/live-scores"),
            ("ESPNCricinfo", "https://www.espncricinfo.com/live-cricket-score"),
        ],
        footer="💡 _For live scores, check the links above!_",
    )


def news_search(query: str, *, session: Optional[requests.Session] = None) -> ExecutionResult:
    result = _bundle(
        f"📰 *News: {query}*",
        [
            ("Google News", f"https://news.google.com/search?q={_q(query)}"),
            ("Bing News", f"https://www.bing.com/news/search?q={_q(query)}"),
        ],
    )
    headlines = fetch_headlines(query, session=session)
    if not headlines:
        return result
    top = "\n".join(f"🗞️ {item['title']}" for item in headlines)
    return ExecutionResult(success=True, output=f"{result.output}\n\n{top}")


def person_search(query: str) -> ExecutionResult:
    return _bundle(
        f"👤 *{query}*",
        [
            ("Google", f"https://www.google.com/search?q={_q(query)}"),
            ("Wikipedia", f"https://en.wikipedia.org/wiki/Special:Search?search={_q(query)}"),
            ("LinkedIn", f"https://www.linkedin.com/search/results/people/?keywords={_q(query)}"),
        ],
        image_query=f"{query} person",
    )


def music_search(query: str) -> ExecutionResult:
    return _bundle(
        f"🎵 *Music: {query}*",
        [
            ("Spotify", f"https://open.spotify.com/search/{_q(query)}"),
            ("YouTube", f"https://www.youtube.com/results?search_query={_q(query + ' song')}"),
            ("JioSaavn", f"https://www.jiosaavn.com/search/{_q(query)}"),
        ],
    )


def movie_search(query: str) -> ExecutionResult:
    return _bundle(
        f"🎬 *Movie: {query}*",
        [
            ("IMDB", f"https://www.imdb.com/find/?q={_q(query)}"),
            ("Google", f"https://www.google.com/search?q={_q(query + ' movie')}"),
            ("JustWatch", f"https://www.justwatch.com/in/search?q={_q(query)}"),
        ],
        image_query=f"{query} movie poster",
    )


def youtube_search(query: str) -> ExecutionResult:
    return _bundle(
        f"🎬 *YouTube: {query}*",
        [("YouTube", f"https://www.youtube.com/results?search_query={_q(query)}")],
        image_query=query,
    )


def amazon_search(query: str) -> ExecutionResult:
    return _bundle(
        f"🛒 *Amazon: {query}*",
        [("Amazon India", f"https://www.amazon.in/s?k={_q(query)}")],
        image_query=query,
    )


def location_search(query: str) -> ExecutionResult:
    return _bundle(
        f"📍 *Location: {query}*",
        [
            ("Google Maps", f"https://www.google.com/maps/search/{_q(query)}"),
            ("Google", f"https://www.google.com/search?q={_q(query + ' location')}"),
        ],
        image_query=f"{query} place",
    )


def game_search(query: str) -> ExecutionResult:
    return _bundle(
        f"🎮 *Game: {query}*",
        [
            ("Steam", f"https://store.steampowered.com/search/?term={_q(query)}"),
            ("Gameplay Videos", f"https://www.youtube.com/results?search_query={_q(query + ' gameplay')}"),
            ("IGDB", f"https://www.igdb.com/search?q={_q(query)}"),
        ],
        image_query=f"{query} game",
    )


def image_search(query: str) -> ExecutionResult:
    return _bundle(
        f"📸 *Images: {query}*",
        [("Google Images", f"https://www.google.com/search?q={_q(query)}&tbm=isch")],
        image_query=query,
    )


_BUILDERS: Dict[str, Callable[[str], ExecutionResult]] = {
    ActionKind.SPORTS_SEARCH: sports_search,
    ActionKind.NEWS_SEARCH: news_search,
    ActionKind.PERSON_SEARCH: person_search,
    ActionKind.MUSIC_SEARCH: music_search,
    ActionKind.MOVIE_SEARCH: movie_search,
    ActionKind.YOUTUBE_SEARCH: youtube_search,
    ActionKind.AMAZON_SEARCH: amazon_search,
    ActionKind.LOCATION_SEARCH: location_search,
    ActionKind.GAME_SEARCH: game_search,
    ActionKind.IMAGE_SEARCH: image_search,
    ActionKind.WEB_SEARCH: web_search,
}


def smart_search(query: str) -> ExecutionResult:
    """Re-route a generic query through the search intent table before falling back to Google."""

    intent = match_intent(query.lower())
    if intent is None or intent.kind == ActionKind.SMART_SEARCH:
        return web_search(query)
    return _BUILDERS[intent.kind](build_query(intent, query))


_BUILDERS[ActionKind.SMART_SEARCH] = smart_search


def _handler(kind: str) -> Callable[[Mapping[str, Scalar]], ExecutionResult]:
    builder = _BUILDERS[kind]

    def run(params: Mapping[str, Scalar]) -> ExecutionResult:
        query = str(params.get("query") or "").strip()
        if not query:
            return ExecutionResult.failure("Search needs a query")
        return builder(query)

    run.__name__ = f"run_{kind}"
    return run


HANDLERS: Dict[str, Callable[[Mapping[str, Scalar]], ExecutionResult]] = {
    kind: _handler(kind) for kind in ActionKind.SEARCH_KINDS
}


__all__ = [
    "HANDLERS",
    "build_session",
    "fetch_headlines",
    "image_url_for",
    "news_search",
    "smart_search",
    "web_search",
]

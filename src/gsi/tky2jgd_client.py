"""
Web版 TKY2JGD Client

GSI(国土地理院)의 Web版 TKY2JGD 를 HTTP 로 구동하여
日本測地系 좌표를 世界測地系(JGD2000) 로 변환합니다.
https://vldb.gsi.go.jp/sokuchi/surveycalc/tky2jgd/main.html

4단계 프로토콜 (모두 같은 세션 쿠키로 순차 실행):
    1. POST tky2jgd_csv.php   - 입력 파일(latlons.in) 업로드, 세션 쿠키 획득
    2. GET  tky2jgd_csv.pl    - 계산 실행, 302 Location 획득
    3. GET  <Location>        - 리다이렉트 추적 (비정상 응답이어도 계속 진행)
    4. GET  csvdown.php       - 결과(latlons.out, Shift_JIS) 다운로드

사용법:
    client = Tky2JgdClient()
    latlons = await client.convert([(35.68, 139.76), ...])
"""

import asyncio
import logging
import time
import warnings
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import aiohttp

from engine.codec import decode, encode
from shared.config import settings
from shared.constants import (
    DOWNLOAD_PATH,
    ECHO_INPUT_FLAG,
    ECHO_INPUT_OFF,
    INPUT_FILENAME,
    OUTPUT_SUFFIX,
    PLACE_LATLON,
    RESULT_COMMENT_MARKER,
    SOKUTI_TOKYO_TO_JGD,
    SUBMIT_PATH,
    TRIGGER_PATH,
    ZONE_NONE,
)
from shared.errors import (
    FollowWarning,
    FormatError,
    RetrievalError,
    SubmissionError,
    TriggerError,
)

logger = logging.getLogger("TKY2JGD")

_last_cache_buster = 0


def _cache_buster() -> int:
    """Epoch milliseconds, strictly increasing within the process."""
    global _last_cache_buster
    _last_cache_buster = max(int(time.time() * 1000), _last_cache_buster + 1)
    return _last_cache_buster


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _is_redirect(status: int) -> bool:
    return 300 <= status < 400


@dataclass
class ConversionSession:
    """Per-run state of one TKY2JGD conversion. Never reused across runs."""

    input_filename: str = INPUT_FILENAME
    cookies: Dict[str, str] = field(default_factory=dict)
    location: Optional[str] = None

    @property
    def output_filename(self) -> str:
        return str(PurePosixPath(self.input_filename).with_suffix(OUTPUT_SUFFIX))

    def cookie_headers(self) -> Dict[str, str]:
        return {"Cookie": "; ".join(f"{k}={v}" for k, v in self.cookies.items())}


def build_request_body(points: Sequence[Tuple[float, float]]) -> str:
    """One `<lat-dms> <lon-dms>` line per point."""
    return "\n".join(f"{encode(lat)} {encode(lon)}" for lat, lon in points)


def parse_result(text: str) -> List[Tuple[float, float]]:
    """
    Parse the downloaded result text into (lat, lon) pairs in line order.
    Lines containing '#' are comments; blank lines are ignored.
    """
    latlons = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if RESULT_COMMENT_MARKER in line or not line.strip():
            continue
        tokens = line.split()
        if len(tokens) < 2:
            raise FormatError(f"result line {lineno}: expected '<lat> <lon>', got {line!r}")
        latlons.append((decode(tokens[0]), decode(tokens[1])))
    return latlons


class Tky2JgdClient:
    """Batch converter backed by Web版 TKY2JGD."""

    name = "tky2jgd"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        result_encoding: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.TKY2JGD_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.TKY2JGD_TIMEOUT_S
        self.result_encoding = result_encoding or settings.TKY2JGD_RESULT_ENCODING

    async def convert(self, points: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
        if not points:
            return []

        body = build_request_body(points)
        conversion = ConversionSession()
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)

        # DummyCookieJar: 쿠키는 ConversionSession 을 통해서만 전달
        async with aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar(), timeout=timeout) as http:
            await self._submit(http, conversion, body)
            await self._trigger(http, conversion)
            await self._follow(http, conversion)
            text = await self._retrieve(http, conversion)

        latlons = parse_result(text)
        logger.info(f"Parsed {len(latlons)} result points (submitted {len(points)})")
        return latlons

    # -- Request 1/4 --
    async def _submit(self, http: aiohttp.ClientSession, conversion: ConversionSession, body: str) -> None:
        url = f"{self.base_url}/{SUBMIT_PATH}"
        form = aiohttp.FormData()
        form.add_field("sokuti", str(SOKUTI_TOKYO_TO_JGD))
        form.add_field("Place", str(PLACE_LATLON))
        form.add_field("inputname", ECHO_INPUT_OFF)
        form.add_field(
            "file",
            body.encode("ascii"),
            filename=conversion.input_filename,
            content_type="text/plain",
        )

        logger.info(f"--#1 request POST: {url}")
        try:
            async with http.post(url, data=form) as resp:
                logger.info(f"response code: {resp.status}")
                if not _is_success(resp.status):
                    raise SubmissionError(f"HTTP {resp.status} {resp.reason}", resp.status, url)
                for name, morsel in resp.cookies.items():
                    conversion.cookies[name] = morsel.value
                if not conversion.cookies:
                    raise SubmissionError("no session cookie in response", resp.status, url)
                await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SubmissionError(f"{type(e).__name__}: {e}", url=url) from e

        logger.info(f"session cookies: {', '.join(conversion.cookies)}")

    # -- Request 2/4 --
    async def _trigger(self, http: aiohttp.ClientSession, conversion: ConversionSession) -> None:
        url = f"{self.base_url}/{TRIGGER_PATH}"
        params = {
            "place": PLACE_LATLON,
            "zone": ZONE_NONE,
            "inputname": ECHO_INPUT_FLAG,
            "filename": conversion.input_filename,
            "sokuti": SOKUTI_TOKYO_TO_JGD,
            "t": _cache_buster(),
        }

        logger.info(f"--#2 request GET: {url} {params}")
        try:
            async with http.get(
                url, params=params, headers=conversion.cookie_headers(), allow_redirects=False
            ) as resp:
                logger.info(f"response code: {resp.status}")
                if not _is_redirect(resp.status):
                    raise TriggerError(f"expected redirect, got HTTP {resp.status} {resp.reason}", resp.status, url)
                location = resp.headers.get("Location")
                if not location:
                    raise TriggerError("redirect without Location header", resp.status, url)
                await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TriggerError(f"{type(e).__name__}: {e}", url=url) from e

        conversion.location = location
        logger.info(f"redirect to: {location}")

    # -- Request 3/4 --
    async def _follow(self, http: aiohttp.ClientSession, conversion: ConversionSession) -> None:
        url = urljoin(f"{self.base_url}/", conversion.location)

        logger.info(f"--#3 request GET: {url}")
        try:
            async with http.get(url, headers=conversion.cookie_headers()) as resp:
                logger.info(f"response code: {resp.status}")
                if not _is_success(resp.status):
                    warnings.warn(
                        f"step 3/4 (follow) answered HTTP {resp.status} {resp.reason} for {url}; continuing",
                        FollowWarning,
                    )
                await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            warnings.warn(f"step 3/4 (follow) failed for {url}: {type(e).__name__}: {e}; continuing", FollowWarning)

    # -- Request 4/4 --
    async def _retrieve(self, http: aiohttp.ClientSession, conversion: ConversionSession) -> str:
        url = f"{self.base_url}/{DOWNLOAD_PATH}"
        params = {"outfile": conversion.output_filename}

        logger.info(f"--#4 request GET: {url} {params}")
        try:
            async with http.get(url, params=params, headers=conversion.cookie_headers()) as resp:
                logger.info(f"response code: {resp.status}")
                if not _is_success(resp.status):
                    raise RetrievalError(f"HTTP {resp.status} {resp.reason}", resp.status, url)
                raw = await resp.read()
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RetrievalError(f"{type(e).__name__}: {e}", url=url) from e

        # Shift_JIS -> str
        try:
            return raw.decode(self.result_encoding)
        except UnicodeDecodeError as e:
            raise RetrievalError(f"result is not {self.result_encoding}: {e}", status, url) from e

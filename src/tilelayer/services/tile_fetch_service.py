import base64
import logging
from collections import deque
from typing import Deque, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from tilelayer.exceptions.tile_layer_exceptions import TileLoadError
from tilelayer.interfaces.map_host import IImageFactory
from tilelayer.models.tile_image import TileImage

logger = logging.getLogger(__name__)


class TileFetchService(IImageFactory):
    """Creates tile images and loads them over HTTP.

    Loads are queued when an image's src is assigned and run by
    process_pending() on the caller's thread, so completions arrive as later
    callbacks rather than inside the src assignment.
    """

    def __init__(self, retry_attempts: int = 3, timeout: int = 30,
                 headers: Optional[Dict[str, str]] = None, session: Optional[requests.Session] = None):
        self.retry_attempts = retry_attempts
        self.timeout = timeout
        self.headers = headers or {}
        self._session = session
        self._pending: Deque[Tuple[TileImage, str, Optional[str]]] = deque()

    def create_session(self) -> requests.Session:
        """Create session with retrying adapter"""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.retry_attempts,
            backoff_factor=1.0,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"]
        )

        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=20,
            pool_maxsize=20
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self.create_session()
        return self._session

    def create_image(self) -> TileImage:
        return TileImage(loader=self)

    def remove(self, image: TileImage) -> None:
        image.parent = None

    def enqueue(self, image: TileImage, src: str) -> None:
        # cross_origin is captured now: it only affects the fetch it was set before
        self._pending.append((image, src, image.cross_origin))

    def pending_count(self) -> int:
        return len(self._pending)

    def process_pending(self, limit: Optional[int] = None) -> int:
        """Run queued loads and dispatch their completions.

        Returns the number of loads processed. A load whose image has since
        been pointed at another src is dropped without notifying anyone.
        """
        processed = 0
        while self._pending and (limit is None or processed < limit):
            image, src, cross_origin = self._pending.popleft()
            processed += 1

            if image.src != src:
                logger.debug(f"Dropping superseded load of {src}")
                continue

            try:
                data = self.fetch(src, cross_origin)
            except TileLoadError as e:
                logger.debug(f"Tile load failed: {e}")
                image.dispatch_error(e)
                continue

            image.dispatch_load(data)

        return processed

    def fetch(self, src: str, cross_origin: Optional[str] = None) -> bytes:
        """Fetch the bytes behind src, raising TileLoadError on any failure"""
        if not src:
            raise TileLoadError("Empty tile URL", url=src)

        if src.startswith('data:'):
            return self._decode_data_url(src)

        headers = dict(self.headers)
        if cross_origin is not None:
            headers['Sec-Fetch-Mode'] = 'cors'

        try:
            response = self.session.get(src, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except Exception as e:
            raise TileLoadError(f"Failed to load tile {src}: {e}", url=src)

        content = response.content
        # Reject empty content, it would render as a broken tile anyway
        if not content:
            raise TileLoadError(f"Empty content received for tile {src}", url=src)
        return content

    @staticmethod
    def _decode_data_url(src: str) -> bytes:
        header, _, payload = src.partition(',')
        try:
            if header.endswith(';base64'):
                return base64.b64decode(payload)
            return payload.encode('utf-8')
        except ValueError as e:
            raise TileLoadError(f"Malformed data URL: {e}", url=src)

"""MediaRemote private-framework loader using PyObjC.

Entry points are resolved exactly once per process. Anything that cannot be
resolved is left as `None` on the returned capability object; callers treat
that absence as a permanent property of the environment.
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Any

from notchplay.services.now_playing_backend import (
    UNAVAILABLE,
    InfoCallback,
    MediaRemoteCapabilities,
)

logger = logging.getLogger(__name__)

MEDIA_REMOTE_PATH = "/System/Library/PrivateFrameworks/MediaRemote.framework"
CLIENT_CLASS_NAME = "_MRNowPlayingClientProtobuf"

# Block arg: index 0 is the block literal itself, index 1 the info dictionary.
_INFO_BLOCK_METADATA = {
    "arguments": {
        1: {
            "callable": {
                "retval": {"type": b"v"},
                "arguments": {0: {"type": b"^v"}, 1: {"type": b"@"}},
            }
        }
    }
}

_FUNCTIONS: list[tuple[Any, ...]] = [
    ("MRMediaRemoteGetNowPlayingInfo", b"v@@?", "", _INFO_BLOCK_METADATA),
    ("MRNowPlayingClientGetBundleIdentifier", b"@@"),
    ("MRMediaRemoteSendCommand", b"Zi@"),
    ("MRMediaRemoteSetElapsedTime", b"vd"),
]


@lru_cache(maxsize=1)
def load_media_remote() -> MediaRemoteCapabilities:
    """Resolve MediaRemote entry points, returning an empty object on failure."""
    if sys.platform != "darwin":
        logger.warning("MediaRemote is only available on macOS; running without it.")
        return UNAVAILABLE
    try:
        import objc
        from Foundation import NSBundle
    except Exception as exc:
        logger.warning("PyObjC not importable (%s); MediaRemote unavailable.", exc)
        return UNAVAILABLE

    bundle = NSBundle.bundleWithPath_(MEDIA_REMOTE_PATH)
    if bundle is None:
        logger.warning("MediaRemote framework not found at %s.", MEDIA_REMOTE_PATH)
        return UNAVAILABLE

    functions: dict[str, Any] = {}
    try:
        objc.loadBundleFunctions(bundle, functions, _FUNCTIONS, skip_undefined=True)
    except Exception as exc:
        logger.warning("Failed to load MediaRemote functions: %s", exc)
        return UNAVAILABLE

    missing = [spec[0] for spec in _FUNCTIONS if spec[0] not in functions]
    if missing:
        logger.warning("MediaRemote entry points missing: %s", ", ".join(missing))

    capabilities = MediaRemoteCapabilities(
        get_now_playing_info=_wrap_get_info(functions.get(_FUNCTIONS[0][0])),
        get_client_bundle_identifier=_wrap_bundle_identifier(
            functions.get("MRNowPlayingClientGetBundleIdentifier")
        ),
        client_from_data=_resolve_client_factory(objc),
        send_command=_wrap_send_command(functions.get("MRMediaRemoteSendCommand")),
        set_elapsed_time=_wrap_set_elapsed(
            functions.get("MRMediaRemoteSetElapsedTime")
        ),
    )
    logger.info(
        "MediaRemote loaded (available=%s, client_factory=%s)",
        capabilities.available,
        capabilities.client_from_data is not None,
    )
    return capabilities


def _wrap_get_info(func: Any) -> Any:
    if func is None:
        return None
    try:
        from dispatch import DISPATCH_QUEUE_PRIORITY_DEFAULT, dispatch_get_global_queue
    except Exception as exc:
        logger.warning("libdispatch bindings not importable: %s", exc)
        return None
    queue = dispatch_get_global_queue(DISPATCH_QUEUE_PRIORITY_DEFAULT, 0)

    def get_now_playing_info(callback: InfoCallback) -> None:
        def _on_info(info: Any) -> None:
            callback(dict(info) if info is not None else None)

        func(queue, _on_info)

    return get_now_playing_info


def _wrap_bundle_identifier(func: Any) -> Any:
    if func is None:
        return None

    def get_client_bundle_identifier(client: Any) -> str | None:
        result = func(client)
        return str(result) if result else None

    return get_client_bundle_identifier


def _resolve_client_factory(objc: Any) -> Any:
    try:
        client_class = objc.lookUpClass(CLIENT_CLASS_NAME)
    except Exception:
        logger.debug("%s not present; bundle ids will be inferred.", CLIENT_CLASS_NAME)
        return None

    def client_from_data(data: bytes) -> Any:
        instance = client_class.alloc()
        if not instance.respondsToSelector_(b"initWithData:"):
            return None
        from Foundation import NSData

        return instance.initWithData_(NSData.dataWithBytes_length_(data, len(data)))

    return client_from_data


def _wrap_send_command(func: Any) -> Any:
    if func is None:
        return None

    def send_command(code: int) -> bool:
        return bool(func(int(code), None))

    return send_command


def _wrap_set_elapsed(func: Any) -> Any:
    if func is None:
        return None

    def set_elapsed_time(seconds: float) -> None:
        func(float(seconds))

    return set_elapsed_time

"""
Media module for the Scorer Watcher pipeline.

Maps leaders to the player pictures stored on disk. A missing picture is
an expected outcome and is reported as a MediaNotFound value.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Union

from scorer_watcher.models import PlayerRecord
from scorer_watcher.utils import get_logger


# Module logger
logger = get_logger("media")

# Default directory holding player pictures
DEFAULT_MEDIA_DIR = "img"
MEDIA_EXTENSION = ".jpeg"


@dataclass(frozen=True)
class MediaAsset:
    """A picture found for a player."""
    path: str


@dataclass(frozen=True)
class MediaNotFound:
    """No picture exists for a player."""
    last_name: str
    expected_path: str


MediaResult = Union[MediaAsset, MediaNotFound]


def media_path_for(record: PlayerRecord, media_dir: str = DEFAULT_MEDIA_DIR) -> Path:
    """Return the expected picture path, ``<media_dir>/<last_name>.jpeg``."""
    return Path(media_dir) / f"{record.last_name}{MEDIA_EXTENSION}"


def resolve_media(record: PlayerRecord, media_dir: str = DEFAULT_MEDIA_DIR) -> MediaResult:
    """
    Look up the picture of a player.

    Args:
        record: Player to look up.
        media_dir: Directory holding the pictures.

    Returns:
        MediaAsset if the file exists, MediaNotFound otherwise.
    """
    path = media_path_for(record, media_dir)

    if path.is_file():
        return MediaAsset(path=str(path))

    return MediaNotFound(last_name=record.last_name, expected_path=str(path))


def resolve_leader_media(
    leaders: Sequence[PlayerRecord],
    media_dir: str = DEFAULT_MEDIA_DIR
) -> List[str]:
    """
    Resolve pictures for every leader, skipping the ones that are missing.

    Args:
        leaders: Leading players, in announcement order.
        media_dir: Directory holding the pictures.

    Returns:
        Paths of the pictures found, in leader order.
    """
    paths: List[str] = []

    for leader in leaders:
        result = resolve_media(leader, media_dir)

        if isinstance(result, MediaNotFound):
            logger.info(f"Player without picture: {result.last_name} ({result.expected_path})")
            continue

        paths.append(result.path)

    logger.debug(f"Resolved {len(paths)}/{len(leaders)} leader picture(s)")

    return paths

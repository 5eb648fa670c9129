"""Local file discovery and streaming."""

import asyncio
from pathlib import Path
from typing import AsyncIterator, List, Union

PathLike = Union[str, Path]

# Read size of the file streams
DEFAULT_BLOCK_BYTES = 256 * 1024


def get_dir_recursive(directory: PathLike) -> List[Path]:
    """All regular files under directory, sorted. Symlinked dirs are not followed."""
    root = Path(directory)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    return sorted(path for path in root.rglob("*") if path.is_file())


def remove_basepath(base: PathLike, file_path: PathLike) -> str:
    """Path of file_path relative to base, in posix form."""
    return Path(file_path).relative_to(Path(base)).as_posix()


async def read_file_blocks(
    file_path: PathLike, block_size: int = DEFAULT_BLOCK_BYTES
) -> AsyncIterator[bytes]:
    """
    Stream a file as blocks of at most block_size bytes.
    The file is opened on first iteration and closed when the stream is
    exhausted or closed with aclose().
    """
    loop = asyncio.get_running_loop()
    with open(file_path, "rb") as fh:
        while True:
            block = await loop.run_in_executor(None, fh.read, block_size)
            if not block:
                return
            yield block

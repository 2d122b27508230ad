from __future__ import annotations
import os
import shutil
from typing import Union

import anyio
import anyio.to_thread

PathLike = Union[str, os.PathLike]

class LocalFileSystem:
    """
    Async file access for the form store. Every call runs the blocking
    syscall in a worker thread so the event loop keeps serving requests.
    """

    async def exists(self, path: PathLike) -> bool:
        return await anyio.Path(path).exists()

    async def copy_file(self, src: PathLike, dst: PathLike) -> None:
        await anyio.to_thread.run_sync(shutil.copyfile, src, dst)

    async def read_text(self, path: PathLike) -> str:
        return await anyio.Path(path).read_text(encoding="utf-8")

    async def write_text(self, path: PathLike, text: str) -> None:
        await anyio.Path(path).write_text(text, encoding="utf-8")

    async def replace(self, src: PathLike, dst: PathLike) -> None:
        # os.replace is atomic when src and dst share a filesystem
        await anyio.Path(src).replace(dst)

from __future__ import annotations
import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from backend.core.assertions import check
from backend.core.config import settings
from backend.models.coercion import as_string, fix_file_contents
from backend.models.forms import FormFileContents, FormInstance, FormTemplate
from backend.services.filesystem import LocalFileSystem

logger = logging.getLogger(__name__)

SEED_FILENAME = "initial-forms.json"

def _new_id() -> str:
    return str(uuid.uuid4())

class FormStore:
    """
    JSON-file persistence for form templates and their filled-in instances.

    - Reads and mutations are synchronous and only touch memory.
    - Every mutation marks the store dirty and schedules the write daemon on
      the event loop captured by load(); a burst of mutations is captured by
      a single write.
    - A write goes to a temp file next to the target and is renamed over it.
      Only one write is in flight at a time; changes that land meanwhile
      trigger one more write when it finishes.
    - Records handed to callers are copies; the document and both indices
      always share the same record objects.
    """

    def __init__(
        self,
        path: Optional[str | Path] = None,
        *,
        seed_path: Optional[str | Path] = None,
        fs: Any = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._path = Path(path or settings.filename)
        self._seed_path = Path(seed_path or settings.seed_filename or self._path.with_name(SEED_FILENAME))
        self._tmp_path = self._path.with_name(self._path.name + ".tmp")
        self._fs = fs or LocalFileSystem()
        self._new_id = id_factory or _new_id

        self._contents: Optional[FormFileContents] = None
        self._templates: Dict[str, FormTemplate] = {}
        self._instances: Dict[str, FormInstance] = {}

        self._dirty = False
        self._writing = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._flush_task: Optional[asyncio.Task] = None

        check(self._well_formed, "invariant failed in constructor")

    # ---------- status ----------
    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._contents is not None

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def writing(self) -> bool:
        return self._writing

    @property
    def instance_count(self) -> int:
        return len(self._instances)

    # ---------- load ----------
    async def load(self) -> FormStore:
        """
        Read the backing file, seeding it from the fixture if it does not exist yet.
        Raises OSError or json.JSONDecodeError when the file cannot be read or parsed;
        individual malformed records are repaired with defaults instead.
        """
        check(self._well_formed, "invariant failed at start of load")
        self._loop = asyncio.get_running_loop()

        if not await self._fs.exists(self._path):
            logger.info("No form file at %s, seeding from %s", self._path, self._seed_path)
            await self._fs.copy_file(self._seed_path, self._path)

        text = await self._fs.read_text(self._path)
        contents = fix_file_contents(json.loads(text))

        self._contents = contents
        self._templates = {t.name: t for t in contents.templates}
        self._instances = {i.id: i for i in contents.instances}

        logger.info(
            "Loaded %d forms and %d instances from %s",
            len(self._templates), len(self._instances), self._path,
        )
        check(self._well_formed, "invariant failed at end of load")
        return self

    # ---------- queries ----------
    def list_all_forms(self) -> List[str]:
        check(self._well_formed, "invariant failed at start of list_all_forms")
        return list(self._templates)

    def get_form(self, name: str) -> Optional[FormTemplate]:
        check(self._well_formed, "invariant failed at start of get_form")
        template = self._templates.get(name)
        return template.model_copy(deep=True) if template is not None else None

    def get_instance(self, instance_id: str) -> Optional[FormInstance]:
        check(self._well_formed, "invariant failed at start of get_instance")
        instance = self._instances.get(instance_id)
        return instance.model_copy(deep=True) if instance is not None else None

    # ---------- mutations ----------
    def create(self, form_name: str, contents: Sequence[Optional[str]]) -> Optional[str]:
        """
        Add an instance of form_name holding one string per slot.
        Returns the new id, or None if the form is unknown, the number of
        contents does not match its slots, or any element is missing.
        The id is returned before the change is on disk.
        """
        check(self._well_formed, "invariant failed at start of create")
        form = self._templates.get(form_name)
        if form is None:
            logger.debug("create: no form named %r", form_name)
            return None
        if len(contents) != len(form.slots):
            logger.debug("create: %r expects %d contents, got %d", form_name, len(form.slots), len(contents))
            return None
        if any(c is None for c in contents):
            logger.debug("create: missing content element for %r", form_name)
            return None

        instance = FormInstance(
            form=form_name,
            id=self._new_id(),
            contents=[as_string(c) for c in contents],
        )
        self._add_instance(instance)
        self._mark_dirty()

        check(self._well_formed, "invariant failed at end of create")
        return instance.id

    def replace(self, instance_id: str, new_contents: Sequence[Optional[str]]) -> bool:
        # Length is checked against the instance's own contents. Templates are
        # immutable after load so this equals the template's slot count.
        check(self._well_formed, "invariant failed at start of replace")
        target = self._instances.get(instance_id)
        if target is None:
            return False
        if len(new_contents) != len(target.contents):
            logger.debug("replace: %r expects %d contents, got %d", instance_id, len(target.contents), len(new_contents))
            return False

        # the index and the document share this object
        target.contents = [as_string(c) for c in new_contents]
        self._mark_dirty()

        check(self._well_formed, "invariant failed at end of replace")
        return True

    def remove(self, instance_id: str) -> bool:
        check(self._well_formed, "invariant failed at start of remove")
        if not self._drop_instance(instance_id):
            return False
        self._mark_dirty()

        check(self._well_formed, "invariant failed at end of remove")
        return True

    def _add_instance(self, instance: FormInstance) -> None:
        self._contents.instances.append(instance)
        self._instances[instance.id] = instance

    def _drop_instance(self, instance_id: str) -> bool:
        target = self._instances.pop(instance_id, None)
        if target is None:
            return False
        self._contents.instances = [i for i in self._contents.instances if i is not target]
        return True

    # ---------- persistence ----------
    def _mark_dirty(self) -> None:
        self._dirty = True
        if self._loop is None or self._loop.is_closed():
            logger.warning("No running event loop for %s, change kept in memory only", self._path)
            return
        # deferred so that a synchronous burst of changes shares one write
        self._loop.call_soon_threadsafe(self._write_daemon)

    def _write_daemon(self) -> None:
        check(self._well_formed, "invariant failed at start of write daemon")
        if self._writing or not self._dirty:
            return

        # snapshot now; later changes re-mark dirty and get their own write
        try:
            text = self._contents.to_json()
        except Exception:
            logger.exception("Could not serialize forms for %s, changes kept in memory", self._path)
            return
        self._dirty = False
        self._writing = True
        self._flush_task = self._loop.create_task(self._flush(text))

    async def _flush(self, text: str) -> bool:
        try:
            await self._fs.write_text(self._tmp_path, text)
            await self._fs.replace(self._tmp_path, self._path)
        except Exception:
            logger.exception("Failed to write %s, will retry on next flush", self._path)
            self._dirty = True
            ok = False
        else:
            logger.debug("Wrote %d bytes to %s", len(text), self._path)
            ok = True
        finally:
            self._writing = False
            self._flush_task = None

        if ok and self._dirty:
            self._write_daemon()
        return ok

    async def drain(self) -> bool:
        """
        Wait until every change made so far is on disk.
        Returns False if a write failed or could not start (the store stays dirty).
        """
        while self._dirty or self._writing:
            if self._flush_task is None:
                self._write_daemon()
            task = self._flush_task
            if task is None:
                return False
            if not await task:
                return False
        return True

    # ---------- invariants ----------
    def _well_formed(self) -> bool:
        if self._contents is None:
            if self._templates:
                return self._report("template index should be empty before load")
            if self._instances:
                return self._report("instance index should be empty before load")
            return True

        templates = {id(t) for t in self._contents.templates}
        if any(id(t) not in templates for t in self._templates.values()):
            return self._report("template index does not match document")
        instances = {id(i) for i in self._contents.instances}
        if any(id(i) not in instances for i in self._instances.values()):
            return self._report("instance index does not match document")
        return True

    def _report(self, message: str) -> bool:
        logger.error("FormStore(%s): %s", self._path, message)
        return False

async def open_store(path: Optional[str | Path] = None, **kwargs: Any) -> FormStore:
    """Create a FormStore for path and load it."""
    return await FormStore(path, **kwargs).load()

"""
In-memory CV state store.

The document is changed only through commands. ``apply_command`` is a pure
reducer returning a new CVDocument; ``CVStore`` wraps it with debounced
persistence to local storage and change notifications.
"""

from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field, TypeAdapter, model_validator

from cvbuilder.config import get_settings
from cvbuilder.models.cv_models import (
    COLLECTION_MODELS,
    CVDocument,
    CustomizationPatch,
    PersonalInfoPatch,
    utcnow,
)
from cvbuilder.services.local_storage import LocalStorage
from cvbuilder.utils.debounce import Debouncer

CollectionName = Literal[
    "workExperience",
    "internships",
    "education",
    "skills",
    "certifications",
    "projects",
    "languages",
]


def _validate_entry(section: str, item: Any) -> BaseModel:
    model = COLLECTION_MODELS[section]
    if isinstance(item, model):
        return item
    if isinstance(item, BaseModel):
        item = item.model_dump()
    return model.model_validate(item)


class UpdatePersonalInfo(BaseModel):
    type: Literal["UpdatePersonalInfo"] = "UpdatePersonalInfo"
    data: PersonalInfoPatch


class UpdateSummary(BaseModel):
    type: Literal["UpdateSummary"] = "UpdateSummary"
    text: Optional[str] = None


class ReplaceCollection(BaseModel):
    type: Literal["ReplaceCollection"] = "ReplaceCollection"
    section: CollectionName
    items: List[Any] = Field(default_factory=list)

    @model_validator(mode="after")
    def _typed_items(self) -> "ReplaceCollection":
        self.items = [_validate_entry(self.section, item) for item in self.items]
        return self


class AddItem(BaseModel):
    type: Literal["AddItem"] = "AddItem"
    section: CollectionName
    item: Any

    @model_validator(mode="after")
    def _typed_item(self) -> "AddItem":
        self.item = _validate_entry(self.section, self.item)
        return self


class UpdateItem(BaseModel):
    """Shallow-merge ``data`` into the entry whose id is ``itemId``."""

    type: Literal["UpdateItem"] = "UpdateItem"
    section: CollectionName
    itemId: str
    data: Dict[str, Any]


class DeleteItem(BaseModel):
    type: Literal["DeleteItem"] = "DeleteItem"
    section: CollectionName
    itemId: str


class UpdateCustomization(BaseModel):
    type: Literal["UpdateCustomization"] = "UpdateCustomization"
    data: CustomizationPatch


class ReorderSections(BaseModel):
    type: Literal["ReorderSections"] = "ReorderSections"
    order: List[str]


class Load(BaseModel):
    type: Literal["Load"] = "Load"
    document: CVDocument


class Reset(BaseModel):
    type: Literal["Reset"] = "Reset"


Command = Annotated[
    Union[
        UpdatePersonalInfo,
        UpdateSummary,
        ReplaceCollection,
        AddItem,
        UpdateItem,
        DeleteItem,
        UpdateCustomization,
        ReorderSections,
        Load,
        Reset,
    ],
    Field(discriminator="type"),
]

_command_adapter = TypeAdapter(Command)


def parse_command(payload: Dict[str, Any]) -> BaseModel:
    """
    Validate a raw command payload, e.g. from a form submission.

    Raises:
        pydantic.ValidationError: If the payload is malformed
    """
    return _command_adapter.validate_python(payload)


def _touch(state: CVDocument, **changes: Any) -> CVDocument:
    # Clock skew must never move updatedAt backwards
    now = max(utcnow(), state.updatedAt, state.createdAt)
    return state.model_copy(update={**changes, "updatedAt": now})


def _dedupe(order: List[str]) -> List[str]:
    seen = set()
    result = []
    for section_id in order:
        if section_id not in seen:
            seen.add(section_id)
            result.append(section_id)
    return result


def apply_command(state: CVDocument, command: Any) -> CVDocument:
    """
    Apply one command and return the resulting document.

    The input document is never modified. Unknown commands return ``state``
    unchanged.

    Args:
        state: Current document
        command: One of the command models of this module

    Returns:
        CVDocument: The new document
    """
    if isinstance(command, UpdatePersonalInfo):
        changes = command.data.model_dump(exclude_unset=True)
        personal_info = state.personalInfo.model_copy(update=changes)
        return _touch(state, personalInfo=personal_info)

    if isinstance(command, UpdateSummary):
        return _touch(state, summary=command.text)

    if isinstance(command, ReplaceCollection):
        return _touch(state, **{command.section: list(command.items)})

    if isinstance(command, AddItem):
        items = getattr(state, command.section)
        return _touch(state, **{command.section: [*items, command.item]})

    if isinstance(command, UpdateItem):
        model = COLLECTION_MODELS[command.section]
        items = []
        for item in getattr(state, command.section):
            if item.id == command.itemId:
                merged = {**item.model_dump(), **command.data, "id": item.id}
                item = model.model_validate(merged)
            items.append(item)
        return _touch(state, **{command.section: items})

    if isinstance(command, DeleteItem):
        items = [i for i in getattr(state, command.section) if i.id != command.itemId]
        return _touch(state, **{command.section: items})

    if isinstance(command, UpdateCustomization):
        changes = command.data.model_dump(exclude_unset=True)
        if "sectionOrder" in changes and changes["sectionOrder"] is not None:
            changes["sectionOrder"] = _dedupe(changes["sectionOrder"])
        customization = state.customization.model_copy(update=changes)
        return _touch(state, customization=customization)

    if isinstance(command, ReorderSections):
        customization = state.customization.model_copy(
            update={"sectionOrder": _dedupe(command.order)}
        )
        return _touch(state, customization=customization)

    if isinstance(command, Load):
        return command.document

    if isinstance(command, Reset):
        fresh = CVDocument.new()
        return fresh.model_copy(update={"updatedAt": max(fresh.updatedAt, state.updatedAt)})

    logger.debug(f"Ignoring unknown command {type(command).__name__}")
    return state


def progress_percentage(document: CVDocument) -> int:
    """
    Share of the eight tracked sections that have content, 0-100.

    Personal info counts when both name and email are set; summary when it
    is non-blank; every other section when it has at least one entry.
    """
    sections = [
        document.personalInfo.is_complete,
        bool(document.summary and document.summary.strip()),
        len(document.workExperience) > 0,
        len(document.education) > 0,
        len(document.skills) > 0,
        len(document.certifications) > 0,
        len(document.projects) > 0,
        len(document.languages) > 0,
    ]
    completed = sum(1 for done in sections if done)
    # Half-up rounding: 1 of 8 sections is 13%, not 12%
    return int(100 * completed / len(sections) + 0.5)


Listener = Callable[[CVDocument], None]


class CVStore:
    """
    Holds exactly one CVDocument and applies commands to it.

    After every change a snapshot write is scheduled on a debounce timer;
    a new change before the timer fires reschedules it, so the latest
    state is what gets written.
    """

    def __init__(
        self,
        storage: Optional[LocalStorage] = None,
        debounce_seconds: Optional[float] = None,
        document: Optional[CVDocument] = None,
    ):
        settings = get_settings()
        if storage is None:
            storage = LocalStorage(settings.storage_dir)
        if debounce_seconds is None:
            debounce_seconds = settings.debounce_seconds

        self.storage = storage
        self._state = document or CVDocument.new()
        self._listeners: List[Listener] = []
        self._debouncer = Debouncer(debounce_seconds, self._persist)

    @property
    def state(self) -> CVDocument:
        return self._state

    @property
    def progress_percentage(self) -> int:
        return progress_percentage(self._state)

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new document after each change. Returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, command: Any) -> CVDocument:
        new_state = apply_command(self._state, command)
        if new_state is self._state:
            return new_state
        self._set_state(new_state)
        self._debouncer.trigger()
        return new_state

    def _set_state(self, document: CVDocument) -> None:
        self._state = document
        for listener in list(self._listeners):
            listener(document)

    def _persist(self) -> None:
        self.storage.save_cv(self._state)

    def hydrate(self) -> bool:
        """
        Replace the state with the saved snapshot, if there is a usable one.

        Returns:
            bool: True when a snapshot was loaded
        """
        document = self.storage.load_cv()
        if document is None:
            return False
        self._set_state(apply_command(self._state, Load(document=document)))
        logger.info(f"Restored CV {document.id} from local storage")
        return True

    def reset(self) -> CVDocument:
        """Start over with an empty document and forget the saved snapshot."""
        self._debouncer.cancel()
        self._set_state(apply_command(self._state, Reset()))
        self.storage.clear_cv()
        return self._state

    def flush(self) -> bool:
        """Write a pending snapshot immediately."""
        return self._debouncer.flush()

    def close(self) -> None:
        self.flush()

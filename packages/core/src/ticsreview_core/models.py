"""Records exchanged between the TiCS viewer, the pipeline and GitHub.

Everything here is created fresh on each run from API responses. The
``from_api`` constructors tolerate missing keys: the viewer omits ``details``
on conditions without file-level data, and ``items`` is then an empty list.
"""

from __future__ import annotations

from dataclasses import dataclass, field

REVIEW_COMMENT_MARKER = ":warning: **TiCS: "


@dataclass(frozen=True)
class Annotation:
    """A single finding reported by the viewer's annotations API."""

    full_path: str
    line: int
    rule: str = ""
    level: str = ""
    category: str = ""
    type: str = ""
    msg: str = ""
    count: int = 1

    @property
    def identity(self) -> tuple:
        # count is not part of the identity
        return (self.full_path, self.type, self.line, self.rule, self.level, self.category, self.msg)

    @classmethod
    def from_api(cls, data: dict) -> Annotation:
        return cls(
            full_path=data.get("fullPath", ""),
            line=int(data.get("line") or 0),
            rule=str(data.get("rule", "")),
            level=str(data.get("level", "")),
            category=str(data.get("category", "")),
            type=str(data.get("type", "")),
            msg=str(data.get("msg", "")),
            count=int(data.get("count") or 1),
        )


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by the pull request, as reported by GitHub."""

    filename: str
    status: str = "modified"  # added | removed | modified | renamed | copied | changed | unchanged
    patch: str | None = None
    previous_filename: str | None = None
    additions: int = 0
    deletions: int = 0

    @classmethod
    def from_github(cls, file) -> ChangedFile:
        return cls(
            filename=file.filename,
            status=file.status,
            patch=getattr(file, "patch", None),
            previous_filename=getattr(file, "previous_filename", None),
            additions=getattr(file, "additions", 0) or 0,
            deletions=getattr(file, "deletions", 0) or 0,
        )


@dataclass(frozen=True)
class ReviewComment:
    body: str
    path: str
    line: int

    @property
    def key(self) -> tuple[str, int, str]:
        return (self.path, self.line, self.body.strip())

    def as_payload(self) -> dict:
        return {"path": self.path, "line": self.line, "body": self.body}


@dataclass
class ReviewComments:
    postable: list[ReviewComment] = field(default_factory=list)
    unpostable: list[ReviewComment] = field(default_factory=list)


@dataclass(frozen=True)
class PreviousComment:
    """A review comment already present on the pull request."""

    id: int
    path: str
    line: int | None
    body: str

    @property
    def key(self) -> tuple[str, int | None, str]:
        return (self.path, self.line, self.body.strip())

    @classmethod
    def from_github(cls, comment) -> PreviousComment:
        # line is None for comments whose line no longer exists in the current
        # diff (e.g. after a force-push); original_line still identifies them.
        line = comment.line if comment.line is not None else getattr(comment, "original_line", None)
        return cls(id=comment.id, path=comment.path, line=line, body=comment.body or "")


@dataclass
class Analysis:
    completed: bool
    status_code: int
    error_list: list[str] = field(default_factory=list)
    warning_list: list[str] = field(default_factory=list)
    explorer_url: str | None = None


@dataclass(frozen=True)
class ConditionItem:
    item_type: str
    name: str
    link: str
    data: dict = field(default_factory=dict)

    @property
    def formatted_value(self) -> str:
        return str(self.data.get("actualValue", {}).get("formattedValue", ""))

    @classmethod
    def from_api(cls, data: dict) -> ConditionItem:
        return cls(
            item_type=data.get("itemType", ""),
            name=data.get("name", ""),
            link=data.get("link", ""),
            data=data.get("data") or {},
        )


@dataclass(frozen=True)
class ConditionDetails:
    data_keys: dict = field(default_factory=dict)
    items: list[ConditionItem] = field(default_factory=list)

    @property
    def title(self) -> str:
        return str(self.data_keys.get("actualValue", {}).get("title", ""))

    @classmethod
    def from_api(cls, data: dict) -> ConditionDetails:
        return cls(
            data_keys=data.get("dataKeys") or {},
            items=[ConditionItem.from_api(item) for item in data.get("items") or []],
        )


@dataclass(frozen=True)
class Condition:
    passed: bool
    message: str
    skipped: bool = False
    details: ConditionDetails | None = None

    @classmethod
    def from_api(cls, data: dict) -> Condition:
        details = data.get("details")
        return cls(
            passed=bool(data.get("passed", False)),
            message=data.get("message", ""),
            skipped=bool(data.get("skipped", False)),
            details=ConditionDetails.from_api(details) if details else None,
        )


@dataclass(frozen=True)
class Gate:
    name: str
    conditions: list[Condition] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> Gate:
        return cls(
            name=data.get("name", ""),
            conditions=[Condition.from_api(c) for c in data.get("conditions") or []],
        )


@dataclass(frozen=True)
class QualityGate:
    passed: bool
    gates: list[Gate] = field(default_factory=list)
    message: str = ""
    url: str = ""
    annotation_urls: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> QualityGate:
        return cls(
            passed=bool(data.get("passed", False)),
            gates=[Gate.from_api(g) for g in data.get("gates") or []],
            message=data.get("message", ""),
            url=data.get("url", ""),
            annotation_urls=[link["url"] for link in data.get("annotationsApiV1Links") or [] if link.get("url")],
        )

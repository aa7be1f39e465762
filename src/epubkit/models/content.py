"""Typed content elements produced from chapter markup."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Element(BaseModel):
    model_config = ConfigDict(frozen=True)


class HeadingElement(_Element):
    """Section heading (h1-h6)."""

    type: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=6)
    content: str


class ParagraphElement(_Element):
    """Body paragraph, also used for text in unrecognized blocks."""

    type: Literal["paragraph"] = "paragraph"
    content: str


class DivElement(_Element):
    """Text sitting directly inside a div."""

    type: Literal["div"] = "div"
    content: str


class BlockquoteElement(_Element):
    """Quotation holding only inline text."""

    type: Literal["blockquote"] = "blockquote"
    content: str


class ListItemElement(_Element):
    """Single list item; lists themselves are not emitted."""

    type: Literal["list-item"] = "list-item"
    content: str


class PageBreakElement(_Element):
    """Explicit page break marker."""

    type: Literal["page-break"] = "page-break"
    label: str | None = None  # printed page number, when the source gives one


class FootnoteRefElement(_Element):
    """Reference to an extracted footnote."""

    type: Literal["footnote"] = "footnote"
    ref: str
    content: str = ""


class ImageElement(_Element):
    """Image reference as written in the document."""

    type: Literal["image"] = "image"
    src: str
    alt: str | None = None


class ContainerElement(_Element):
    """Block holding nested elements instead of text."""

    type: Literal["container"] = "container"
    role: Literal["blockquote", "list"]
    children: list["ContentElement"] = Field(default_factory=list)


ContentElement = Annotated[
    Union[
        HeadingElement,
        ParagraphElement,
        DivElement,
        BlockquoteElement,
        ListItemElement,
        PageBreakElement,
        FootnoteRefElement,
        ImageElement,
        ContainerElement,
    ],
    Field(discriminator="type"),
]

# Variants whose payload is plain text and which vanish when it is blank
TextElement = Union[
    HeadingElement,
    ParagraphElement,
    DivElement,
    BlockquoteElement,
    ListItemElement,
]

ContainerElement.model_rebuild()

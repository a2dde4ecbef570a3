"""
Field descriptors for the generic form renderer.

A form is described by an ordered list of FieldConfig objects. Each one names
the record attribute it edits, the widget kind that edits it and the display
hints the widget needs.
"""

from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, model_validator

WidgetKind = Literal[
    "input", "textarea", "dropdown", "tagpicker", "file",
    "checkbox", "radio", "date", "tiptap"
]

InputType = Literal["text", "number", "email", "url", "time"]

FileKind = Literal["image", "video"]


# Widgets that pick a single value from ``options``
CHOICE_WIDGETS = {"dropdown", "radio"}


class FieldConfig(BaseModel):
    """One entry of a form's field list."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    label: str
    widget: WidgetKind
    placeholder: Optional[str] = None
    description: Optional[str] = None
    options: List[str] = []
    tag_options: List[str] = []
    # Resolve tag_options from a named vocabulary (e.g. "amenities") at load time
    tag_options_source: Optional[str] = None
    input_type: InputType = "text"
    bucket: Optional[str] = None
    file_kind: FileKind = "image"

    @model_validator(mode="after")
    def _check_widget_requirements(self):
        if not self.name.strip():
            raise ValueError("field name must not be empty")
        if self.widget in CHOICE_WIDGETS and not self.options:
            raise ValueError(f"'{self.widget}' field '{self.name}' needs options")
        return self

    @property
    def is_numeric(self) -> bool:
        return self.widget == "input" and self.input_type == "number"


def field_names(fields: List[FieldConfig]) -> List[str]:
    return [field.name for field in fields]


from __future__ import annotations

from typing import Annotated, Any, List

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field


def _document_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _document_list(value: Any) -> Any:
    if value is None:
        return []
    return value


def _document_object(value: Any) -> Any:
    if value is None:
        return {}
    return value


def _input_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "\n".join(str(item).strip() for item in value if item is not None and str(item).strip())
    if isinstance(value, str):
        return value.strip()
    return value


Text = Annotated[str, BeforeValidator(_document_text)]
TextList = Annotated[List[Text], BeforeValidator(_document_list)]
InputText = Annotated[str, BeforeValidator(_input_text)]

_DOCUMENT_CONFIG = ConfigDict(frozen=True, extra="ignore")


class ResumeInputFields(BaseModel):
    """Candidate-supplied form fields. Every field is a trimmed string, never null."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    first_name: InputText = Field(default="", validation_alias=AliasChoices("first_name", "firstName"))
    last_name: InputText = Field(default="", validation_alias=AliasChoices("last_name", "lastName"))
    email: InputText = ""
    phone: InputText = ""
    city: InputText = ""
    province: InputText = ""
    title: InputText = ""
    links: InputText = ""
    skills: InputText = ""
    experience: InputText = ""
    education: InputText = ""
    summary: InputText = ""


class ResumeHeader(BaseModel):
    model_config = _DOCUMENT_CONFIG

    full_name: Text = ""
    title: Text = ""
    location: Text = ""
    email: Text = ""
    phone: Text = ""
    links: TextList = Field(default_factory=list)


class ResumeSkills(BaseModel):
    model_config = _DOCUMENT_CONFIG

    core: TextList = Field(default_factory=list)
    tools: TextList = Field(default_factory=list)
    languages: TextList = Field(default_factory=list)


class ResumeExperience(BaseModel):
    model_config = _DOCUMENT_CONFIG

    company: Text = ""
    role: Text = ""
    location: Text = ""
    employment_type: Text = ""
    start_date: Text = ""
    end_date: Text = ""
    bullets: TextList = Field(default_factory=list)


class ResumeEducation(BaseModel):
    model_config = _DOCUMENT_CONFIG

    degree: Text = ""
    school: Text = ""
    location: Text = ""
    start_date: Text = ""
    end_date: Text = ""


class ResumeDocument(BaseModel):
    """Canonical output schema. Every leaf is present once validated."""

    model_config = _DOCUMENT_CONFIG

    header: Annotated[ResumeHeader, BeforeValidator(_document_object)] = Field(
        default_factory=ResumeHeader
    )
    summary: Text = ""
    skills: Annotated[ResumeSkills, BeforeValidator(_document_object)] = Field(
        default_factory=ResumeSkills
    )
    experience: Annotated[List[ResumeExperience], BeforeValidator(_document_list)] = Field(
        default_factory=list
    )
    education: Annotated[List[ResumeEducation], BeforeValidator(_document_list)] = Field(
        default_factory=list
    )
    certifications: TextList = Field(default_factory=list)
    extras: TextList = Field(default_factory=list)


RESUME_DOCUMENT_KEYS = tuple(ResumeDocument.model_fields.keys())

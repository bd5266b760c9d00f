from pydantic import BaseModel, Field, SkipValidation

from v8_wrench.core.ports.analysis import ClassDeclaration


class AnnotationDescriptor(BaseModel):
    name: str
    arguments: list[str] = Field(default_factory=list)


class FieldDescriptor(BaseModel):
    name: str
    type: str


class ClassRecord(BaseModel):
    name: str
    source_location: str
    # borrowed from the analysis forest, only valid for the current run
    declaration: SkipValidation[ClassDeclaration] = Field(exclude=True, repr=False)
    base_class: str | None = None
    annotations: list[AnnotationDescriptor] = Field(default_factory=list)
    fields: list[FieldDescriptor] = Field(default_factory=list)

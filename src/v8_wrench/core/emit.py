from v8_wrench.core.naming import camel_case
from v8_wrench.models import AnnotationDescriptor, ClassRecord


def render_banner(source_location: str, tool_name: str = "v8-wrench") -> str:
    return (
        f"// This file is automatically generated by {tool_name}.\n"
        "//\n"
        "// WARNING: All modifications to this file will be lost with the next build!\n"
        "//\n"
        f"// Source file: {source_location}\n"
        "//\n\n"
    )


def render_annotation(annotation: AnnotationDescriptor) -> str:
    line = f"@{camel_case(annotation.name)}"
    if annotation.arguments:
        line += f"({', '.join(annotation.arguments)})"
    return line


def render_class(record: ClassRecord) -> str:
    """Render a populated record as a Torque class declaration."""
    parts = [render_annotation(annotation) + "\n" for annotation in record.annotations]
    header = f"class {record.name}"
    if record.base_class:
        header += f" extends {record.base_class}"
    parts.append(header + " {\n")
    parts.extend(f"  {field.name}: {field.type};\n" for field in record.fields)
    parts.append("}\n")
    return "".join(parts)


def render_file(record: ClassRecord, tool_name: str = "v8-wrench") -> str:
    return render_banner(record.source_location, tool_name) + render_class(record)

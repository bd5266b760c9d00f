import typer

from v8_wrench.cli.classes import classes
from v8_wrench.cli.generate import generate

app = typer.Typer(
    name="v8-wrench",
    help="Generate Torque class declarations from annotated C++ classes.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("generate")(generate)
app.command("classes")(classes)


def main() -> None:
    app()

"""tcarve extract command - copy one test and its dependencies."""

from pathlib import Path

import click

from testcarve.config.models import CarveConfig
from testcarve.core.errors import CarveError, ConfigError
from testcarve.core.logging import clear_request_id, get_logger, set_request_id
from testcarve.core.progress import pluralize, spinner, status, task
from testcarve.extract import build_request, extract_test

log = get_logger("cli.extract")


@click.command()
@click.option(
    "--corpus",
    type=click.Path(file_okay=False, path_type=Path),
    help="Corpus root containing src/ and tests/",
)
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Existing directory to extract into",
)
@click.option("--test", "test_name", help="Test to extract, e.g. api/java_lang/Foo/index.html")
@click.option("--dry-run", is_flag=True, help="List the dependencies without copying")
@click.pass_context
def extract_command(
    ctx: click.Context,
    corpus: Path | None,
    output: Path | None,
    test_name: str | None,
    dry_run: bool,
) -> None:
    """Extract a single test plus the sources it needs to compile.

    The output directory receives the files at their corpus-relative paths,
    together with a Makefile and a run_test.sh script.
    """
    ctx.ensure_object(dict)
    config: CarveConfig = ctx.obj.get("config") or CarveConfig()

    # Validation errors are usage errors: nothing has been written yet
    try:
        request = build_request(corpus, output, test_name, page_ext=config.layout.page_ext)
    except ConfigError as e:
        raise click.UsageError(e.message, ctx=ctx) from e

    set_request_id()
    log.info("extraction_started", test=test_name, dry_run=dry_run)
    try:
        feedback = spinner("Resolving dependencies") if dry_run else task(f"Extracting {test_name}")
        with feedback:
            result = extract_test(request, config, dry_run=dry_run)
    except CarveError as e:
        log.error("extraction_failed", error=e.error_name, **e.details)
        raise click.ClickException(str(e)) from e
    finally:
        clear_request_id()

    if dry_run:
        for path in result.files:
            click.echo(str(path))
        status(f"{pluralize(len(result.files), 'dependency', 'dependencies')} found", style="info")
        return

    extra = " and the native tree" if result.native_tree_copied else ""
    status(
        f"Copied {pluralize(result.copied, 'file')}{extra} to {request.output_root}",
        style="success",
    )

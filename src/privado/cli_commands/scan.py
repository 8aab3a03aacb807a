"""``privado scan`` — scan a repository with the Privado engine image."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privado.cli_commands._common import (
    RESULTS_LINK_MESSAGE,
    abs_path,
    debug_option,
    docker_client_or_exit,
    engine_environment,
    finish,
    load_docker_access,
    notify_update,
    run_engine,
    start_command,
)
from privado.cli_commands._output import console, exit_with
from privado.runtime.container import options as opt

if TYPE_CHECKING:
    from privado.context import RunContext


# (cli flag, engine argument); each needs --enable-experiments
EXPERIMENTAL_FLAGS = (
    ("enable_javascript", "--enablejs"),
    ("disable_runtime_semantics", "-drs"),
    ("disable_flow_separation_by_data_element", "-dfsde"),
    ("disable_this_filtering", "-dtf"),
    ("disable_2nd_level_closure", "-d2lc"),
)


@click.command()
@click.argument("repository", type=click.Path())
@click.option(
    "--config", "-c", "external_rules", default="",
    help="Config (with rules) directory passed to privado-core for scanning. "
    "These rules are merged with the default set that Privado defines.",
)
@click.option(
    "--ignore-default-rules", "-i", is_flag=True,
    help="Ignore the default rules and only consider the rule configurations given with -c.",
)
@click.option(
    "--skip-dependency-download", is_flag=True,
    help="Skip downloading locally unavailable dependencies. Results may be incomplete.",
)
@click.option(
    "--disable-deduplication", is_flag=True,
    help="Keep duplicate and subset dataflows in the results.",
)
@click.option("--upload", is_flag=True, help="Upload the scan result to Privado Dashboard.")
@click.option("--skip-upload", is_flag=True, help="Do not upload the result artifacts.")
@click.option(
    "--overwrite", is_flag=True,
    help="Overwrite existing results without asking for confirmation.",
)
@click.option(
    "--jvm-args", default="",
    help="JVM arguments for the scan engine; sets the 'JAVA_TOOL_OPTIONS' environment variable.",
)
@click.option("--enable-experiments", is_flag=True, help="Enable experimental features.")
@click.option(
    "--enable-javascript", is_flag=True,
    help="Experimental: enable the beta code scanner for javascript.",
)
@click.option(
    "--disable-runtime-semantics", is_flag=True,
    help="Experimental: do not generate semantics at runtime.",
)
@click.option(
    "--disable-this-filtering", is_flag=True,
    help="Experimental: skip flow filtering with the 'this filtering' algorithm.",
)
@click.option(
    "--disable-flow-separation-by-data-element", is_flag=True,
    help="Experimental: skip flow separation by data element.",
)
@click.option(
    "--disable-2nd-level-closure", "disable_2nd_level_closure", is_flag=True,
    help="Experimental: turn on 2nd level source derivation.",
)
@click.option(
    "--generate-unresolved-name-report", is_flag=True,
    help="Generate reports of unresolved method names.",
)
@click.option("--test-output", is_flag=True, help="Generate unfiltered flow output.")
@debug_option
@click.pass_obj
def scan(
    ctx: RunContext,
    repository: str,
    external_rules: str,
    ignore_default_rules: bool,
    skip_dependency_download: bool,
    disable_deduplication: bool,
    upload: bool,
    skip_upload: bool,
    overwrite: bool,
    jvm_args: str,
    enable_experiments: bool,
    generate_unresolved_name_report: bool,
    test_output: bool,
    debug: bool,
    **experimental: bool,
) -> None:
    """Scan a codebase or REPOSITORY to identify privacy issues and generate compliance reports."""
    start_command(ctx, debug)

    if upload and skip_upload:
        exit_with(ctx, "Options --upload and --skip-upload cannot be used together.", error=True)

    rules_dir = abs_path(external_rules) if external_rules else None
    if rules_dir is not None and not rules_dir.exists():
        exit_with(ctx, f"Could not validate the config directory: {rules_dir}", error=True)

    if ignore_default_rules and rules_dir is None:
        exit_with(
            ctx,
            "Default rules cannot be ignored without any external config.\n"
            "You can specify your own rules and config using the `-c or --config` option.\n\n"
            "For more info, run: 'privado --help'\n",
            error=True,
        )

    notify_update(ctx)

    repo = abs_path(repository)
    if not overwrite:
        results = repo / ctx.app.privacy_results_path_suffix
        if results.exists():
            console.print(f"> Scan report already exists ({ctx.app.privacy_results_path_suffix})")
            console.print("\n> Rescan will overwrite existing results")
            if not click.confirm("Continue?", default=False):
                exit_with(ctx, "Terminating..", error=False)
            console.print()

    if not enable_experiments and any(experimental.values()):
        exit_with(
            ctx,
            "Experimental features cannot be used without the `--enable-experiments` flag.\n\n"
            "For more info, run: 'privado --help'\n",
            error=True,
        )

    console.print(f"> Scanning directory: {repo}", markup=False)

    client = docker_client_or_exit(ctx)
    load_docker_access(ctx, client)

    paths = ctx.app.container
    # -ic is passed even when the default rules are ignored
    args = [paths.source_code, "-ic", paths.internal_rules]
    if upload:
        args.append("--upload")
    elif skip_upload:
        args.append("--skip-upload")

    run_engine(
        ctx,
        client,
        # the image was pulled while reading the access key
        opt.with_latest_image(False),
        opt.with_args(args),
        *(opt.with_flag(flag, experimental[name]) for name, flag in EXPERIMENTAL_FLAGS),
        opt.with_flag("-ur", generate_unresolved_name_report),
        opt.with_flag("-tout", test_output),
        opt.with_attached_output(),
        opt.with_source_volume(str(repo)),
        opt.with_user_config_volume(str(ctx.app.user_configuration_file)),
        opt.with_user_key_volume(str(ctx.app.user_key_path)),
        opt.with_package_cache_volumes(),
        opt.with_external_rules_volume(str(rules_dir) if rules_dir else ""),
        opt.with_ignore_default_rules(ignore_default_rules),
        opt.with_skip_dependency_download(skip_dependency_download),
        opt.with_disabled_deduplication(disable_deduplication),
        opt.with_debug(debug),
        opt.with_environment_variables(
            engine_environment(ctx, host_scan_dir=repo, jvm_args=jvm_args)
        ),
        opt.with_auto_spawn_browser_on_url_messages([RESULTS_LINK_MESSAGE]),
        opt.with_interrupt(),
    )
    finish(ctx)

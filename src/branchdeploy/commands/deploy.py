"""
Deploy module for the branchdeploy application.

This module provides the command that uploads the directories changed by the
head commit to the S3 bucket of the current environment.
"""

from pathlib import Path

import typer
from rich.text import Text

from branchdeploy.core import environment, repository, sync
from branchdeploy.core.S3Singleton import S3Singleton
from branchdeploy.core.errors import DeployError, UploadError
from branchdeploy.utils import s3_utils, utils

app = typer.Typer(
    context_settings={"help_option_names": ["--help", "-h"]},
    pretty_exceptions_enable=False,
)

@app.command()
def deploy(
    confirm: bool = typer.Option(False, "--confirm", "-c", help="Deploy without prompting for confirmation"),
    path: Path = typer.Option(
        Path("."), "--path", "-p",
        help="Project root, a git working tree with a github.com origin",
        file_okay=False, dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
) -> None:
    """
    Deploy the directories changed by the latest commit to S3.

    The master branch deploys to the production bucket under v1/<owner>/<repo>/,
    any other branch to the development bucket under v1/<owner>/<repo>/<branch>/.
    Credentials are read from BUCKET_NAME_*, AWS_KEY_* and AWS_SECRET_*
    (suffixed _PROD or _DEV).
    """
    # Setup logging
    logger = utils.setup_logging(verbose)

    # Gather facts from git and the environment before touching the network
    try:
        repo_info = repository.inspect_repository(path)
        target = environment.resolve_target(repo_info.branch_name, repo_info.repo_identifier)
    except DeployError as e:
        utils.info(Text(str(e), style="bold red"))
        logger.debug("Deployment aborted", exc_info=True)
        raise typer.Exit(code=1)

    # Tell the user what we're going to sync
    utils.info(sync.describe_plan(repo_info, target))

    # Await confirmation
    if not confirm:
        confirmation = typer.confirm("Continue?", default=False)
        if not confirmation:
            utils.info(Text("Deployment cancelled.", style="bold yellow"))
            return

    if not repo_info.affected_directories:
        utils.info(Text("No directories changed in the latest commit, nothing to deploy.", style="bold yellow"))
        return

    S3Singleton(target.credentials, target.region)

    try:
        results = sync.sync_directories(
            repo_info.affected_directories, target, repo_info.project_root,
            upload=s3_utils.upload_directory,
        )
    except UploadError as e:
        utils.info(Text.assemble(
            ("✗ Failed to upload.\n", "bold red"),
            (str(e), "red"),
        ))
        logger.debug("Upload failed", exc_info=e.cause)
        raise typer.Exit(code=1)

    # Display completion message
    success_text = Text.assemble(
        ("✔ Deployed.", "bold green"),
        ("\nUploaded ", "bold"),
        (str(sum(len(uploaded) for uploaded in results)), "bold green"),
        (" files from ", "bold"),
        (str(len(results)), "bold green"),
        (" directories\n\n  ", "bold"),
        (sync.public_url(target), "bold cyan"),
    )
    utils.info(success_text)

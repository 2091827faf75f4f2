"""CLI commands for the Azure DevOps client."""

import argparse
import json
import logging
import sys

import httpx


def _scopes_from_settings(settings) -> list[str]:
    return [*settings.azure_devops_projects, *settings.azure_devops_orgs]


def _list_repos(args) -> int:
    from .client import Client
    from .errors import AzureDevOpsError
    from .models import ListRepositoriesByProjectOrOrgArgs
    from .settings import get_settings

    settings = get_settings()
    scopes = args.scopes or _scopes_from_settings(settings)
    if not scopes:
        print(
            "No scope given and neither AZURE_DEVOPS_PROJECTS nor AZURE_DEVOPS_ORGS is set",
            file=sys.stderr,
        )
        return 1

    try:
        client = Client(args.urn, settings.connection())
        results = {}
        for scope in scopes:
            repos = client.list_repositories_by_project_or_org(
                ListRepositoriesByProjectOrOrgArgs(project_or_org_name=scope),
                timeout=args.timeout,
            )
            results[scope] = repos
    except (AzureDevOpsError, httpx.HTTPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        out = {
            scope: [repo.model_dump(by_alias=True) for repo in repos]
            for scope, repos in results.items()
        }
        json.dump(out, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    for scope, repos in results.items():
        print(f"{scope} ({len(repos)} repositories)")
        for repo in repos:
            suffix = " (disabled)" if repo.is_disabled else ""
            print(f"  {repo.name}\t{repo.web_url}{suffix}")
    return 0


def main(argv=None):
    # Shared so --verbose works before or after the subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Log requests and rate limit waits",
    )

    parser = argparse.ArgumentParser(
        description="Query an Azure DevOps code host",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common],
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list-repos subcommand
    list_parser = subparsers.add_parser(
        "list-repos",
        help="List repositories of orgs or projects",
        parents=[common],
    )
    list_parser.add_argument(
        "scopes",
        nargs="*",
        metavar="SCOPE",
        help="Org ('org') or project ('org/project'); defaults to the configured projects and orgs",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Print repositories as JSON",
    )
    list_parser.add_argument(
        "--urn",
        default="azuredevops",
        help="Connection identifier the rate limit is keyed on (default: azuredevops)",
    )
    list_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds each request may take, rate limit wait included",
    )

    args = parser.parse_args(argv)
    verbose = getattr(args, "verbose", False)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    if args.command == "list-repos":
        return _list_repos(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

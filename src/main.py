import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from src.application.github_data_service import GitHubDataService
from src.application.views import SORT_KEYS, language_breakdown, paginate, sort_repositories, top_repositories
from src.domain.exceptions import GitHubDataException
from src.domain.models import ContributionRecord, UserBundle
from src.infrastructure.config import ClientConfig
from src.infrastructure.github_client import GitHubClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch GitHub profile data for one or two users.")
    parser.add_argument("username", help="GitHub username to load")
    parser.add_argument("--compare", metavar="OTHER", help="Second username for side-by-side comparison")
    parser.add_argument("--contributions", action="store_true", help="Also fetch the daily contribution history")
    parser.add_argument("--sort", choices=sorted(SORT_KEYS), default="stars", help="Repository sort order")
    parser.add_argument("--page", type=positive_int, default=1, help="Repository page to show (1-based)")
    parser.add_argument("--per-page", type=positive_int, default=6, help="Repositories per page")
    return parser


def render_bundle(
        bundle: UserBundle,
        sort: str = "stars",
        contributions: Optional[ContributionRecord] = None,
        page: int = 1,
        per_page: int = 6,
) -> Dict[str, Any]:
    """Shapes one user's data the way the profile view consumes it."""
    page_repos, total_pages = paginate(sort_repositories(bundle.repositories, sort), page, per_page)
    rendered = {
        "profile": bundle.profile.model_dump(mode="json"),
        "top_repositories": [repo.model_dump(mode="json") for repo in top_repositories(bundle.repositories)],
        "repositories": [repo.model_dump(mode="json") for repo in page_repos],
        "page": page,
        "total_pages": total_pages,
        "language_stats": bundle.language_stats.model_dump(mode="json"),
        "top_languages": [share.model_dump(mode="json") for share in language_breakdown(bundle.language_stats)],
    }
    if contributions is not None:
        rendered["contributions"] = {
            "source": contributions.source,
            "total": contributions.total,
            "days": [day.model_dump(mode="json") for day in contributions.days],
        }
    return rendered


async def run(args: argparse.Namespace, config: ClientConfig) -> List[Dict[str, Any]]:
    usernames = [args.username] + ([args.compare] if args.compare else [])

    async with GitHubClient(config) as github_client:
        service = GitHubDataService(github_client)

        if args.compare:
            bundles = list(await service.compare_users(args.username, args.compare))
        else:
            bundles = [await service.fetch_user_bundle(args.username)]

        rendered = []
        for username, bundle in zip(usernames, bundles):
            contributions = await service.fetch_contribution_data(username) if args.contributions else None
            rendered.append(render_bundle(bundle, args.sort, contributions, page=args.page, per_page=args.per_page))
        return rendered


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Load environment variables from .env file
    load_dotenv()
    try:
        config = ClientConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if not config.authenticated:
        logger.warning("GITHUB_TOKEN is not set; requests are unauthenticated and heavily rate limited.")

    try:
        rendered = await run(args, config)
    except GitHubDataException as e:
        logger.error(str(e))
        return 1

    print(json.dumps(rendered if args.compare else rendered[0], indent=2))
    return 0

def cli() -> None:
    sys.exit(asyncio.run(main()))

if __name__ == "__main__":
    cli()

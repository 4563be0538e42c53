"""CLI entry point for the lead hunter."""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from typing import get_args

from src.app.outreach import contact_links
from src.app.state import (
    AppState,
    LoadSaved,
    OpenProposal,
    SetFacets,
    SetTab,
    default_criteria,
    is_saved,
    perform_search,
    reduce,
    visible_facet_options,
    visible_leads,
)
from src.backend import get_provider
from src.core.config import Settings
from src.core.db import init_db
from src.core.schemas import Category, ContactFilter, Lead, Location, Mode
from src.core.store import SavedLeadStore
from src.pipeline.discovery import LeadDiscovery
from src.pipeline.proposal import generate_proposal


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def _add_facets(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--platform", default="All", help="Platform facet (substring)")
    parser.add_argument("--country", default="All", help="Country facet (substring)")
    parser.add_argument(
        "--contact",
        default="All",
        choices=list(get_args(ContactFilter)),
        help="Require a contact channel",
    )
    parser.add_argument(
        "--export",
        choices=["json"],
        help="Export visible leads to format (json)",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Lead hunter - discover freelance gigs and job vacancies with contacts",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- search subcommand ---
    search_parser = subparsers.add_parser("search", help="Run one discovery call")
    search_parser.add_argument("--keyword", "-k", required=True, help="What to look for")
    search_parser.add_argument("--mode", choices=list(get_args(Mode)))
    search_parser.add_argument("--location", choices=list(get_args(Location)))
    search_parser.add_argument("--category", choices=list(get_args(Category)))
    search_parser.add_argument(
        "--start", type=date.fromisoformat, help="Start date YYYY-MM-DD",
    )
    search_parser.add_argument(
        "--end", type=date.fromisoformat, help="End date YYYY-MM-DD (default: today)",
    )
    search_parser.add_argument(
        "--save",
        nargs="+",
        type=int,
        default=[],
        metavar="N",
        help="Toggle the leads shown at these positions (1-based) in the saved collection",
    )
    _add_facets(search_parser)
    _add_common(search_parser)

    # --- saved subcommand ---
    saved_parser = subparsers.add_parser("saved", help="List saved leads")
    saved_parser.add_argument(
        "--remove",
        nargs="+",
        default=[],
        metavar="ID",
        help="Remove the given ids from the saved collection",
    )
    _add_facets(saved_parser)
    _add_common(saved_parser)

    # --- propose subcommand ---
    propose_parser = subparsers.add_parser(
        "propose",
        help="Generate an outreach message for a saved lead",
    )
    propose_parser.add_argument("--id", required=True, help="Saved lead id")
    propose_parser.add_argument("--skills", help="Skills to pitch (default: from settings)")
    _add_common(propose_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def format_lead(lead: Lead, position: int | None = None, saved: bool = False) -> str:
    """Render one lead as a plain-text card."""
    marker = "*" if saved else " "
    number = f"#{position} " if position is not None else ""
    header = f"{marker} {number}[{lead.id}] {lead.title}"
    meta = " | ".join(p for p in (lead.platform, lead.country or "", lead.date) if p)
    lines = [header, f"    {meta}"]
    if lead.description:
        lines.append(f"    {lead.description[:200]}")
    if lead.tags:
        lines.append(f"    tags: {', '.join(lead.tags)}")
    if lead.contacts.contact_name:
        lines.append(f"    contact: {lead.contacts.contact_name}")
    for channel, link in contact_links(lead).items():
        lines.append(f"    {channel}: {link}")
    return "\n".join(lines)


def print_view(state: AppState, export_format: str | None) -> None:
    """Print the active collection after facets are applied."""
    leads = visible_leads(state)

    if export_format == "json":
        print(json.dumps(
            [lead.model_dump(mode="json", by_alias=True) for lead in leads],
            indent=2,
            ensure_ascii=False,
        ))
        return

    options = visible_facet_options(state)
    print(f"\n{len(leads)} leads shown ({state.active_tab})")
    if options.platforms:
        print(f"  platforms: {', '.join(options.platforms)}")
    if options.countries:
        print(f"  countries: {', '.join(options.countries)}")
    for position, lead in enumerate(leads, start=1):
        print()
        print(format_lead(lead, position, saved=is_saved(state, lead.id)))


def apply_facets(state: AppState, args: argparse.Namespace) -> AppState:
    return reduce(
        state, SetFacets(platform=args.platform, country=args.country, contact=args.contact),
    )


def toggle_leads(store: SavedLeadStore, leads: list[Lead]) -> None:
    for lead in leads:
        now_saved = store.toggle(lead)
        print(f"{'Saved' if now_saved else 'Removed'}: {lead.title}")


def pick_positions(leads: list[Lead], positions: list[int]) -> list[Lead]:
    """Leads at 1-based positions; out-of-range positions are reported and skipped."""
    picked: list[Lead] = []
    for position in positions:
        if not 1 <= position <= len(leads):
            print(f"Warning: no lead at position {position}", file=sys.stderr)
            continue
        picked.append(leads[position - 1])
    return picked


def cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    """Handle search subcommand."""
    criteria = default_criteria(settings, args.keyword, today=args.end)
    overrides = {
        "mode": args.mode,
        "location": args.location,
        "category": args.category,
        "start_date": args.start,
    }
    criteria = criteria.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    provider = get_provider(settings.backend.provider)
    discovery = LeadDiscovery(
        provider,
        model=settings.backend.model,
        web_search=settings.backend.web_search,
    )

    conn = init_db(settings.storage.path)
    store = SavedLeadStore(conn)
    state = reduce(AppState(), LoadSaved(leads=tuple(store.load())))

    print(f"Searching {criteria.mode} leads for '{criteria.keyword}' "
          f"({criteria.location}, {criteria.start_date} .. {criteria.end_date})...")
    state = asyncio.run(
        perform_search(state, criteria, discovery, timeout=settings.backend.timeout_s)
    )

    if state.status == "error":
        print(f"Error: {state.error_message}", file=sys.stderr)
        conn.close()
        return 1

    state = apply_facets(state, args)
    if args.save:
        toggle_leads(store, pick_positions(visible_leads(state), args.save))
        state = reduce(state, LoadSaved(leads=tuple(store.load())))

    print_view(state, args.export)
    conn.close()
    return 0


def cmd_saved(args: argparse.Namespace, settings: Settings) -> int:
    """Handle saved subcommand."""
    conn = init_db(settings.storage.path)
    store = SavedLeadStore(conn)

    if args.remove:
        by_id = {lead.id: lead for lead in store.load()}
        missing = [lead_id for lead_id in args.remove if lead_id not in by_id]
        for lead_id in missing:
            print(f"Warning: no saved lead with id '{lead_id}'", file=sys.stderr)
        toggle_leads(store, [by_id[lead_id] for lead_id in args.remove if lead_id in by_id])

    state = reduce(AppState(), LoadSaved(leads=tuple(store.load())))
    state = reduce(state, SetTab(tab="saved"))
    print_view(apply_facets(state, args), args.export)
    conn.close()
    return 0


def cmd_propose(args: argparse.Namespace, settings: Settings) -> int:
    """Handle propose subcommand."""
    conn = init_db(settings.storage.path)
    state = reduce(AppState(), LoadSaved(leads=tuple(SavedLeadStore(conn).load())))
    conn.close()

    lead = next((s for s in state.saved if s.id == args.id), None)
    if lead is None:
        print(f"Error: no saved lead with id '{args.id}'", file=sys.stderr)
        return 1
    state = reduce(state, OpenProposal(lead=lead))

    provider = get_provider(settings.backend.provider)
    skills = args.skills or settings.proposal.skills
    target = state.proposal_target or lead
    text = asyncio.run(generate_proposal(target, provider, skills, model=settings.backend.model))

    print(format_lead(target, saved=True))
    print()
    print(text)
    for channel, link in contact_links(target, text).items():
        if channel in ("email", "whatsapp"):
            print(f"Send via {channel}: {link}")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    handlers = {
        "search": cmd_search,
        "saved": cmd_saved,
        "propose": cmd_propose,
    }
    try:
        code = handlers[args.command](args, settings)
    except (ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()

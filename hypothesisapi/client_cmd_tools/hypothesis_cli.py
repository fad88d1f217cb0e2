import argparse
import logging
import sys
from typing import IO, Sequence
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from hypothesisapi import __version__ as hypothesisapi_version
from hypothesisapi.api.client import Api
from hypothesisapi.entities import (BaseEntity, Expand, GroupFilters, InputAnnotation, Order,
                                    SearchQuery, Sort, Target, new_quote)
from hypothesisapi.exceptions import HypothesisEnvironmentError, HypothesisException
from hypothesisapi.utils.logging_utils import load_cmdline_logging_config

# Create console for user output and logger for developer debugging
console = Console(highlight=False)
_LOGGER = logging.getLogger(__name__)
_USER_LOGGER = logging.getLogger('user_logger')


def _add_output_argument(parser: argparse.ArgumentParser):
    parser.add_argument('-o', '--file', type=str, default=None,
                        help='Write the JSON output to this file instead of the standard output')


def _add_input_annotation_arguments(parser: argparse.ArgumentParser):
    parser.add_argument('--text', type=str, default='', help='Annotation text / comment')
    parser.add_argument('--tags', type=str, nargs='+', default=None, help='Tags attached to the annotation')
    parser.add_argument('--group', type=str, default='', help="Unique identifier of the annotation's group")
    parser.add_argument('--references', type=str, nargs='+', default=[],
                        help='Annotation IDs this annotation is a reply to')
    parser.add_argument('--exact', type=str, default=None,
                        help='Highlight this exact text of the document (TextQuoteSelector)')
    parser.add_argument('--prefix', type=str, default='', help='Text right before the --exact text')
    parser.add_argument('--suffix', type=str, default='', help='Text right after the --exact text')


def _input_annotation(args: argparse.Namespace) -> InputAnnotation:
    target = Target()
    if args.exact is not None:
        target = Target(source=args.uri, selector=[new_quote(args.exact, args.prefix, args.suffix)])
    return InputAnnotation(uri=args.uri,
                           text=args.text,
                           tags=args.tags,
                           group=args.group,
                           references=args.references,
                           target=target)


def _search_query(args: argparse.Namespace) -> SearchQuery:
    return SearchQuery(limit=args.limit,
                       sort=args.sort,
                       search_after=args.search_after,
                       offset=args.offset,
                       order=args.order,
                       uri=args.uri,
                       uri_parts=args.uri_parts,
                       wildcard_uri=args.wildcard_uri,
                       user=args.user,
                       group=args.group,
                       tag=args.tag,
                       tags=args.tags,
                       any=args.any,
                       quote=args.quote,
                       references=args.references,
                       text=args.text)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='hypothesis',
        description='Call the Hypothesis API from the comfort of your terminal',
        epilog="""
Credentials are read from $HYPOTHESIS_NAME (username) and $HYPOTHESIS_KEY (personal API key),
or from the values saved with hypothesis-config.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {hypothesisapi_version}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print debug messages')
    commands = parser.add_subparsers(dest='command', required=True)

    ### annotations ###
    annotations = commands.add_parser('annotations', help='Manage annotations')
    annotations_cmds = annotations.add_subparsers(dest='action', required=True)

    create = annotations_cmds.add_parser('create', help='Create an annotation')
    create.add_argument('uri', type=str, nargs='?', default='', help='URI that the annotation is attached to')
    _add_input_annotation_arguments(create)

    update = annotations_cmds.add_parser('update', help='Update an existing annotation')
    update.add_argument('id', type=str, help='unique ID of the annotation to update')
    update.add_argument('--uri', type=str, default='', help='New URI of the annotation')
    _add_input_annotation_arguments(update)

    search = annotations_cmds.add_parser('search', help='Search for annotations with optional filters')
    search.add_argument('--limit', type=int, default=20, help='Maximum number of annotations to return [0..200]')
    search.add_argument('--sort', type=str, default=Sort.UPDATED.value, choices=[s.value for s in Sort])
    search.add_argument('--search-after', type=str, default='',
                        help='Start point for a page of results. Use with --order asc')
    search.add_argument('--offset', type=int, default=0, help='Number of initial annotations to skip')
    search.add_argument('--order', type=str, default=Order.DESC.value, choices=[o.value for o in Order])
    search.add_argument('--uri', type=str, default='')
    search.add_argument('--uri-parts', type=str, default='')
    search.add_argument('--wildcard-uri', type=str, default='')
    search.add_argument('--user', type=str, default='', help='acct:<username>@<authority>')
    search.add_argument('--group', type=str, action='append', default=[],
                        help='Group ID. Can be given multiple times')
    search.add_argument('--tag', type=str, default='')
    search.add_argument('--tags', type=str, nargs='+', default=[])
    search.add_argument('--any', type=str, default='')
    search.add_argument('--quote', type=str, default='')
    search.add_argument('--references', type=str, default='')
    search.add_argument('--text', type=str, default='')
    search.add_argument('--all', action='store_true',
                        help='Fetch every page of results (sorted in ascending order)')
    _add_output_argument(search)

    for action, helpmsg in [('fetch', 'Fetch annotation by ID'),
                            ('delete', 'Delete annotation by ID'),
                            ('flag', 'Flag an annotation for review (moderation)'),
                            ('hide', 'Hide an annotation'),
                            ('show', 'Show ("un-hide") an annotation')]:
        p = annotations_cmds.add_parser(action, help=helpmsg)
        p.add_argument('id', type=str, help=f'unique ID of the annotation to {action}')
        if action == 'fetch':
            _add_output_argument(p)

    ### groups ###
    groups = commands.add_parser('groups', help='Manage groups')
    groups_cmds = groups.add_subparsers(dest='action', required=True)
    expand_choices = [e.value for e in Expand]

    glist = groups_cmds.add_parser('list', help='Retrieve a list of applicable groups')
    glist.add_argument('--authority', type=str, default='hypothes.is')
    glist.add_argument('--document-uri', type=str, default='')
    glist.add_argument('--expand', type=str, action='append', default=[], choices=expand_choices)
    _add_output_argument(glist)

    gcreate = groups_cmds.add_parser('create', help='Create a new, private group')
    gcreate.add_argument('name', type=str, help='group name')
    gcreate.add_argument('description', type=str, nargs='?', default=None, help='group description')

    gfetch = groups_cmds.add_parser('fetch', help='Fetch a single group')
    gfetch.add_argument('id', type=str, help='unique Group ID')
    gfetch.add_argument('-e', '--expand', type=str, action='append', default=[], choices=expand_choices)
    _add_output_argument(gfetch)

    gupdate = groups_cmds.add_parser('update', help='Update a group')
    gupdate.add_argument('id', type=str, help='unique Group ID')
    gupdate.add_argument('-n', '--name', type=str, default=None, help='new group name')
    gupdate.add_argument('-d', '--description', type=str, default=None, help='new group description')

    gmembers = groups_cmds.add_parser('members', help='Fetch all members of a group')
    gmembers.add_argument('id', type=str, help='unique Group ID')
    _add_output_argument(gmembers)

    gleave = groups_cmds.add_parser('leave', help='Remove yourself from a group')
    gleave.add_argument('id', type=str, help='unique Group ID')

    ### profile ###
    profile = commands.add_parser('profile', help='Manage user profile')
    profile_cmds = profile.add_subparsers(dest='action', required=True)
    puser = profile_cmds.add_parser('user', help='Fetch profile information of the authenticated user')
    _add_output_argument(puser)
    pgroups = profile_cmds.add_parser('groups', help='Fetch the groups of the authenticated user')
    _add_output_argument(pgroups)

    return parser.parse_args(argv)


def write_output(result: BaseEntity | Sequence[BaseEntity], file: str | None = None) -> None:
    """Write `result` as JSON. A list is written as one JSON record per line."""
    records = result if isinstance(result, (list, tuple)) else [result]

    def _write(f: IO):
        for r in records:
            f.write(r.asjson())
            f.write('\n')

    if file is None:
        _write(sys.stdout)
        sys.stdout.flush()
    else:
        with open(file, 'w') as f:
            _write(f)
        _USER_LOGGER.info(f'Output written to "{file}"')


def _run_annotations(args: argparse.Namespace, api: Api) -> None:
    annotations = api.annotations
    if args.action == 'create':
        annotation = annotations.create(_input_annotation(args))
        console.print(f"Annotation {annotation.id} created")
    elif args.action == 'update':
        annotation = annotations.update(args.id, _input_annotation(args))
        console.print(f"Annotation {annotation.id} updated")
    elif args.action == 'search':
        query = _search_query(args)
        if args.all:
            query.order = Order.ASC
            result = annotations.search_all(query)
        else:
            result = annotations.search(query)
        write_output(result, args.file)
    elif args.action == 'fetch':
        write_output(annotations.get_by_id(args.id), args.file)
    elif args.action == 'delete':
        if annotations.delete(args.id):
            console.print(f"Annotation {args.id} deleted")
        else:
            console.print(f"Couldn't delete annotation {args.id}")
    elif args.action == 'flag':
        annotations.flag(args.id)
        console.print(f"Annotation {args.id} flagged")
    elif args.action == 'hide':
        annotations.hide(args.id)
        console.print(f"Annotation {args.id} hidden")
    elif args.action == 'show':
        annotations.show(args.id)
        console.print(f"Annotation {args.id} unhidden")


def _run_groups(args: argparse.Namespace, api: Api) -> None:
    groups = api.groups
    if args.action == 'list':
        filters = GroupFilters(authority=args.authority,
                               document_uri=args.document_uri,
                               expand=args.expand)
        write_output(groups.get_list(filters), args.file)
    elif args.action == 'create':
        group = groups.create(args.name, args.description)
        console.print(f"Group {group.id} created")
    elif args.action == 'fetch':
        write_output(groups.get_by_id(args.id, args.expand), args.file)
    elif args.action == 'update':
        group = groups.update(args.id, args.name, args.description)
        console.print(f"Group {group.id} updated")
    elif args.action == 'members':
        write_output(groups.get_members(args.id), args.file)
    elif args.action == 'leave':
        groups.leave(args.id)
        console.print(f"Left group {args.id}")


def _run_profile(args: argparse.Namespace, api: Api) -> None:
    if args.action == 'user':
        write_output(api.profile.get_user(), args.file)
    elif args.action == 'groups':
        write_output(api.profile.get_groups(), args.file)


def run(args: argparse.Namespace, api: Api) -> None:
    if args.command == 'annotations':
        _run_annotations(args, api)
    elif args.command == 'groups':
        _run_groups(args, api)
    elif args.command == 'profile':
        _run_profile(args, api)


def main(argv: Sequence[str] | None = None):
    args = _parse_args(argv)
    load_cmdline_logging_config(verbose=args.verbose)

    try:
        api = Api.from_env()
    except HypothesisEnvironmentError as e:
        console.print(f"[red]❌ Could not authorize: {e.variable} is not set.[/red]")
        console.print(f"[dim]💡 {e.suggestion}[/dim]")
        sys.exit(1)
    except HypothesisException as e:
        console.print(f"[red]❌ Could not authorize: {escape(str(e))}[/red]")
        sys.exit(1)

    try:
        with api:
            run(args, api)
    except (HypothesisException, ValidationError) as e:
        _LOGGER.debug("Command failed", exc_info=True)
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

# rupeebook/cli.py
import dataclasses
import functools
import os
import click
import yaml
from dotenv import load_dotenv

from rupeebook.config import load_config
from rupeebook.core.analysis import TIME_RANGES, analyze
from rupeebook.core.models import FilterSpec
from rupeebook.core.reports import REPORT_TYPES, generate_report, ledger_view
from rupeebook.errors import RupeeBookError
from rupeebook.loaders import get_loader
from rupeebook.logging_setup import LOG_LEVEL_ENV_VAR, configure_logging
from rupeebook.outputs import get_output
from rupeebook.outputs.formatter import format_inr


def filter_options(func):
    """Options shared by every command that filters a book's entries."""
    options = [
        click.option('--entry-type', 'entry_type', default=None,
                     type=click.Choice(['all', 'in', 'out']),
                     help='Only cash-in or cash-out entries (default: all)'),
        click.option('--category', 'categories', multiple=True,
                     help='Category to include; repeat for several'),
        click.option('--subcategory', 'subcategories', multiple=True,
                     help='Subcategory to include; repeat for several'),
        click.option('--member', 'member_ids', multiple=True,
                     help='Member id whose entries to include; repeat for several'),
        click.option('--from', 'date_from', default=None, help='First day to include (YYYY-MM-DD)'),
        click.option('--to', 'date_to', default=None, help='Last day to include (YYYY-MM-DD)'),
        click.option('--search', 'search_term', default=None,
                     help='Text to find in remarks, or digits to find in amounts'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def ledger_options(func):
    func = click.option('--book', default=None,
                        help='Book id or name, when the file is a backup holding several books')(func)
    func = click.argument('ledger_path', type=click.Path(exists=True, dir_okay=False))(func)
    return func


def build_spec(cfg, entry_type, categories, subcategories, member_ids, date_from, date_to, search_term):
    """Filters from the config file, overridden by whatever was given on the command line."""
    data = dict(cfg.get('filters') or {})
    overrides = {
        'type': entry_type,
        'category': list(categories) or None,
        'subcategory': list(subcategories) or None,
        'members': list(member_ids) or None,
        'date_from': date_from,
        'date_to': date_to,
        'search_term': search_term,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return FilterSpec.from_dict(data)


def find_member(ledger, wanted):
    if wanted is None:
        return None
    for member in ledger.members:
        if wanted in (member.id, member.name):
            return member
    raise click.ClickException(f"No member '{wanted}' in book {ledger.name!r}")


def reports_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RupeeBookError as exc:
            raise click.ClickException(str(exc))
    return wrapper


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (default: $RUPEEBOOK_CONFIG, else built-in defaults)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with RUPEEBOOK_* settings'
)
@click.option('--log-level', default=None, help='Logging level, e.g. DEBUG or WARNING')
@click.pass_context
@reports_errors
def main(ctx, config_path, env_file, log_level):
    """
    Cash-book reports: balances, filtered ledgers, day-wise and category-wise
    summaries, and Excel/CSV/HTML exports of a book snapshot.
    """
    if env_file:
        load_dotenv(env_file)
    cfg = load_config(config_path)
    configure_logging(log_level or os.getenv(LOG_LEVEL_ENV_VAR) or cfg.get('log_level'))
    ctx.obj = cfg


@main.command()
@ledger_options
@click.option('--report', 'report_type', default='all-entries', type=click.Choice(REPORT_TYPES),
              help='Report shape (default: all-entries)')
@click.option('--output', 'output_format', default='excel',
              type=click.Choice(['excel', 'csv', 'html']),
              help='Output target: excel, csv, or html')
@click.option('--output-dir', default=None, type=click.Path(file_okay=False),
              help='Directory for the report file (overrides config)')
@click.option('--as', 'viewer', default=None, help='Member id or name generating the report')
@click.option('--opening-balance', default=0.0, type=float, show_default=True,
              help='Balance the running balances start from')
@filter_options
@click.pass_obj
@reports_errors
def report(cfg, ledger_path, book, report_type, output_format, output_dir, viewer, opening_balance,
           entry_type, categories, subcategories, member_ids, date_from, date_to, search_term):
    """Export a report for the book in LEDGER_PATH."""
    if output_dir:
        cfg = dict(cfg, output_dir=output_dir)
    ledger = get_loader('ledger', cfg).load(ledger_path, book=book)
    spec = build_spec(cfg, entry_type, categories, subcategories, member_ids, date_from, date_to, search_term)
    member = find_member(ledger, viewer)

    result = generate_report(
        ledger.transactions,
        ledger.members,
        spec,
        report_type,
        book_name=ledger.name,
        opening_balance=opening_balance,
        config=cfg,
        viewer=member,
        settings=ledger.data_operator_settings,
    )
    path = get_output(output_format, cfg).write(result, generated_by=member.name if member else "")

    if result.skipped:
        click.echo(f"⚠️  Left out {len(result.skipped)} entries with unreadable dates.", err=True)
    if not result.data:
        click.echo("No entries match the selected filters.")
    click.echo(f"Written {result.report_title} ({len(result.data)} row(s)) to {path}")


@main.command()
@ledger_options
@click.option('--as', 'viewer', default=None, help='Member id or name viewing the book')
@filter_options
@click.pass_obj
@reports_errors
def entries(cfg, ledger_path, book, viewer, entry_type, categories, subcategories, member_ids,
            date_from, date_to, search_term):
    """List the book's entries, newest first, with running balances."""
    ledger = get_loader('ledger', cfg).load(ledger_path, book=book)
    spec = build_spec(cfg, entry_type, categories, subcategories, member_ids, date_from, date_to, search_term)
    view = ledger_view(ledger, spec, viewer=find_member(ledger, viewer), config=cfg)

    if not view.rows:
        click.echo("No entries match the selected filters.")
    for row in view.rows:
        sign = '+' if row['type'] == 'in' else '-'
        line = (
            f"{row['date']:%d-%m-%Y %H:%M}  {row['remark'] or row['category']:<30.30}  "
            f"{row['category']:<15.15}  {row['member_name']:<15.15}  {sign}{format_inr(row['amount']):>12}"
        )
        if view.show_balances:
            line += f"  Bal: {format_inr(row['balance'])}"
        click.echo(line)

    if view.summary is not None:
        click.echo("")
        click.echo(f"Total Cash In:  {format_inr(view.summary.total_cash_in)}")
        click.echo(f"Total Cash Out: {format_inr(view.summary.total_cash_out)}")
        click.echo(f"Net Balance:    {format_inr(view.summary.net_balance)}")
    if view.skipped:
        click.echo(f"⚠️  {len(view.skipped)} entries with unreadable dates are not shown.", err=True)


@main.command(name='analyze')
@ledger_options
@click.option('--range', 'time_range', default='all_time', type=click.Choice(TIME_RANGES),
              help='Time range to analyze (default: all_time)')
@click.option('--today', default=None, type=click.DateTime(formats=['%Y-%m-%d']),
              help='Treat this day as today (YYYY-MM-DD)')
@click.pass_obj
@reports_errors
def analyze_cmd(cfg, ledger_path, book, time_range, today):
    """Totals, top categories, daily trend and largest entries for a time range."""
    ledger = get_loader('ledger', cfg).load(ledger_path, book=book)
    result = analyze(ledger.transactions, time_range, today.date() if today else None, cfg)

    click.echo(f"{ledger.name}: {time_range.replace('_', ' ')}")
    click.echo(f"Total Cash In:  {format_inr(result['total_in'])}")
    click.echo(f"Total Cash Out: {format_inr(result['total_out'])}")
    click.echo(f"Net Balance:    {format_inr(result['net_balance'])}")
    if result['categories']:
        click.echo("\nCategories:")
        for row in result['categories']:
            click.echo(f"  {row['name']:<20.20} in {format_inr(row['cash_in']):>12}  out {format_inr(row['cash_out']):>12}")
    for title, key in (("Top cash in", 'top_in'), ("Top cash out", 'top_out')):
        if result[key]:
            click.echo(f"\n{title}:")
            for tx in result[key]:
                click.echo(f"  {format_inr(tx.amount):>12}  {tx.remark or tx.category}")


def _entry_record(tx):
    record = {k: v for k, v in dataclasses.asdict(tx).items() if v not in (None, "")}
    record['date'] = tx.date.isoformat() if hasattr(tx.date, 'isoformat') else str(tx.date)
    return record


@main.command(name='import')
@click.argument('sheet_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--book-name', required=True, help='Name of the book the entries belong to')
@click.option('--out', 'out_path', required=True, type=click.Path(dir_okay=False),
              help='Where to write the book snapshot (YAML)')
@click.option('--member', 'member_id', default=None, help='Member id to record as the author of every entry')
@click.option('--map', 'mappings', multiple=True,
              help='Column mapping FIELD=HEADER, e.g. --map remark="Narration"; repeat for several')
@click.pass_obj
@reports_errors
def import_cmd(cfg, sheet_path, book_name, out_path, member_id, mappings):
    """Read entries from a CSV or Excel sheet into a book snapshot."""
    columns = {}
    for mapping in mappings:
        field, sep, header = mapping.partition('=')
        if not sep:
            raise click.BadParameter(f"Expected FIELD=HEADER, got '{mapping}'", param_hint='--map')
        columns[field.strip()] = header.strip()

    loader = get_loader('sheet', cfg)
    txs = loader.load(sheet_path, columns=columns)
    if member_id:
        txs = [dataclasses.replace(tx, member_id=member_id) for tx in txs]
    if not txs:
        raise click.ClickException(f"Could not find any valid entries in {sheet_path}")

    book_id = "".join(ch if ch.isalnum() else "-" for ch in book_name.lower()).strip("-") or "book"
    snapshot = {
        'book': {'id': book_id, 'name': book_name},
        'transactions': [_entry_record(tx) for tx in txs],
    }
    with open(out_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(snapshot, f, sort_keys=False, allow_unicode=True)

    if loader.skipped_rows:
        click.echo(f"⚠️  Skipped {loader.skipped_rows} row(s) without a usable date or amount.", err=True)
    click.echo(f"Imported {len(txs)} entries into {out_path}.")

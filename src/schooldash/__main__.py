"""Start the SchoolDash app or run a command line task."""
import argparse
import json
import logging
import pathlib

import rich
import rich.logging
import rich.table
import textual.logging

from schooldash.model import config, database, excel, reports, seed, session
import schooldash.view.main_app


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Define command line arguments."""
    parser = argparse.ArgumentParser(prog="SchoolDash")
    subparsers = parser.add_subparsers()
    parser.set_defaults(func=None)

    app_parser = subparsers.add_parser(
        "app",
        help="Run the SchoolDash application."
    )
    app_parser.set_defaults(func=run_app)
    app_parser.add_argument(
        "-d", "--db_path",
        help="Path to SchoolDash database",
        type=pathlib.Path,
        default=None
    )
    app_parser.add_argument(
        "-c", "--config_path",
        help="Path to config file",
        type=pathlib.Path,
        default=None
    )

    seed_parser = subparsers.add_parser(
        "seed",
        help="Load demonstration data into an empty database."
    )
    seed_parser.set_defaults(func=seed_data)
    seed_parser.add_argument(
        "db_path",
        type=pathlib.Path,
        help="Path to SchoolDash Sqlite file."
    )

    report_parser = subparsers.add_parser(
        "report",
        help="Print an attendance report and write it to a CSV file."
    )
    report_parser.set_defaults(func=print_report)
    report_parser.add_argument(
        "db_path",
        type=pathlib.Path,
        help="Path to SchoolDash Sqlite file."
    )
    report_parser.add_argument(
        "-e", "--email",
        required=True,
        help="E-mail address of the user whose scope is reported."
    )
    report_parser.add_argument(
        "-p", "--password",
        required=True,
        help="Password of the user."
    )
    report_parser.add_argument(
        "--period",
        choices=[period.value for period in reports.Period],
        default=reports.Period.SEVEN_DAYS.value,
        help="Reporting window."
    )
    report_parser.add_argument(
        "--xlsx",
        action="store_true",
        help="Write attendance-report-<date>.xlsx to the output folder."
    )
    report_parser.add_argument(
        "-o", "--output",
        type=pathlib.Path,
        default=None,
        help="Output folder. Defaults to the current directory."
    )

    export_parser = subparsers.add_parser(
        "export-json",
        help="Write every table in the database to a JSON file."
    )
    export_parser.set_defaults(func=export_json)
    export_parser.add_argument("db_path", type=pathlib.Path)
    export_parser.add_argument("json_path", type=pathlib.Path)

    import_parser = subparsers.add_parser(
        "import-json",
        help="Create a new database from a JSON file."
    )
    import_parser.set_defaults(func=import_json)
    import_parser.add_argument("json_path", type=pathlib.Path)
    import_parser.add_argument("db_path", type=pathlib.Path)

    config_parser = subparsers.add_parser(
        "new-config",
        help="Write a configuration file with default settings."
    )
    config_parser.set_defaults(func=new_config)
    config_parser.add_argument("config_path", type=pathlib.Path)
    return parser


def configure_cli_logging() -> None:
    """Send log records to the terminal through rich."""
    logging.basicConfig(
        level=config.settings.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[rich.logging.RichHandler(rich_tracebacks=True)],
    )


def run_app(args: argparse.Namespace) -> None:
    """Run the SchoolDash TUI application."""
    config.settings.update_from_args(args)
    logging.basicConfig(
        level=config.settings.log_level,
        handlers=[textual.logging.TextualHandler()],
    )
    app = schooldash.view.main_app.SchoolDash()
    app.run()


def seed_data(args: argparse.Namespace) -> None:
    """Load demonstration data."""
    configure_cli_logging()
    dbase = database.DBase.open_or_create(to_absolute_path(args.db_path))
    if seed.seed_database(dbase):
        rich.print(f"[green]Loaded demonstration data into {dbase.db_path}[/green]")
    else:
        rich.print(f"[yellow]{dbase.db_path} already has users. Nothing loaded.")


def print_report(args: argparse.Namespace) -> None:
    """Print an attendance report and write it to the output folder."""
    configure_cli_logging()
    db_path = to_absolute_path(args.db_path)
    if not db_path.is_file():
        raise database.DBaseError(f"Database file {db_path} does not exist.")
    dbase = database.DBase(db_path)
    user_session = session.Session(
        dbase, db_path.with_suffix(".report-session.json")
    )
    user = user_session.login(args.email, args.password)
    report = reports.build_report(
        dbase, user_session.scope, reports.Period(args.period)
    )
    user_session.logout()

    table = rich.table.Table(
        title=f"{report.period.label}: {report.overall_rate}% attendance"
        f" ({user.name})"
    )
    for column in reports.CSV_HEADER:
        table.add_column(column)
    for class_report in report.classes:
        stats = class_report.stats
        table.add_row(
            class_report.class_name,
            str(class_report.student_count),
            f"{class_report.attendance_rate}%",
            str(stats.present),
            str(stats.absent),
            str(stats.late),
            str(stats.excused),
        )
    rich.print(table)

    output = to_absolute_path(args.output or pathlib.Path.cwd())
    output.mkdir(parents=True, exist_ok=True)
    rich.print(f"Wrote {reports.export_csv(report, output)}")
    if args.xlsx:
        excel_name = f"attendance-report-{report.end.date().isoformat()}.xlsx"
        excel_path = output / excel_name
        excel.write_report(report, excel_path)
        rich.print(f"Wrote {excel_path}")


def export_json(args: argparse.Namespace) -> None:
    """Save the database's contents as JSON."""
    configure_cli_logging()
    dbase = database.DBase(to_absolute_path(args.db_path))
    with open(to_absolute_path(args.json_path), "w") as jfile:
        json.dump(dbase.to_dict(), jfile, indent=2, default=str)
    logger.info("Exported %s to %s", args.db_path, args.json_path)


def import_json(args: argparse.Namespace) -> None:
    """Load a JSON export into a new database."""
    configure_cli_logging()
    with open(to_absolute_path(args.json_path)) as jfile:
        db_data = json.load(jfile)
    dbase = database.DBase(to_absolute_path(args.db_path), create_new=True)
    dbase.load_from_dict(db_data)
    logger.info("Imported %s into %s", args.json_path, args.db_path)


def new_config(args: argparse.Namespace) -> None:
    """Write a default configuration file."""
    config_path = to_absolute_path(args.config_path)
    config.settings.create_new_config_file(config_path)
    rich.print(f"Created {config_path}")


def to_absolute_path(path: pathlib.Path) -> pathlib.Path:
    """Convert relative paths to absolute paths."""
    if not path.is_absolute():
        path = pathlib.Path.cwd() / path
    return path


def main() -> None:
    """Entry point for the schooldash console script."""
    parser = build_parser()
    args = parser.parse_args()
    if args.func is None:
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()

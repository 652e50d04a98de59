# src/remote_eq/cli/__main__.py

"""
Main entry point for launching the Remote EQ Editor graphical user interface.
"""

import argparse
import json
import logging

from remote_eq import config
from remote_eq.core.session import EqSession


def build_parser():
    parser = argparse.ArgumentParser(
        prog="remote-eq-editor",
        description="Parametric EQ editor mirrored to a remote Firebase database.")
    parser.add_argument("--url", default=config.STORE_URL,
                        help="Database base URL (default: $REMOTE_EQ_URL)")
    parser.add_argument("--auth", default=config.STORE_AUTH,
                        help="Database auth secret (default: $REMOTE_EQ_AUTH)")
    parser.add_argument("--state", metavar="FILE",
                        help="Seed the session from a local state document (JSON)")
    parser.add_argument("--plot", metavar="OUT",
                        help="Save the response curve of the seeded session to an image and exit")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


def configure_logging(level_name):
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')


def load_state_file(session, path):
    """Apply a JSON state document from disk to the session."""
    with open(path, "r") as f:
        document = json.load(f)
    session.apply_document(document)
    return session


def main(argv=None):
    """Launch the Remote EQ Editor UI, or export a plot when --plot is given."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    session = EqSession()
    if args.state:
        load_state_file(session, args.state)

    if args.plot:
        from remote_eq.ui.curve_export import plot_response
        plot_response(session.snapshot(), args.plot)
        return 0

    print("Launching Remote EQ Editor UI...")

    from PyQt5 import QtWidgets
    from remote_eq.sync.firebase_store import FirebaseStore
    from remote_eq.sync.liveness_monitor import LivenessMonitor
    from remote_eq.ui.eq_editor import EqEditorWindow

    # Set up the Qt Application
    app = QtWidgets.QApplication([])

    store = FirebaseStore(args.url, args.auth)
    session.sync = store
    monitor = LivenessMonitor(store, session)
    editor = EqEditorWindow(app, session, store=store, monitor=monitor)

    store.fetch_state()
    monitor.start()

    # Execute the application
    result = app.exec_()
    monitor.stop()
    del editor
    return result


if __name__ == "__main__":
    raise SystemExit(main())

"""Runs rulox source files, or the interactive shell when no file is given. Also uses the error handling context
manager. Installed as the `rulox` console script.

rulox calls map onto nested Python calls (about a dozen frames each), so the interpreter runs on a worker thread
with a large stack and a matching recursion limit.
"""

import argparse
import sys
import threading

from rulox.lang.error import ErrorHandler
from rulox.lang.session import Session
from rulox.lang.shell import Shell
from rulox.syntax.printer import AstPrinter


STACK_SIZE = 512 * 1024 * 1024
RECURSION_LIMIT = 150000


def run(args, status):
    """Thread body: runs args.file (or the shell) and appends the exit code to status. If an internal error escapes,
    nothing is appended.
    """
    try:
        with ErrorHandler() as error_handler:
            if args.file is None:
                Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()

            else:
                sess = Session(error_handler, args.file, cmd_line=False)

                if args.tokens:
                    for token in sess.tokens(sess.source):
                        print(token)
                    error_handler.checkpoint()

                elif args.ast:
                    statements = sess.syntax_tree(sess.source)
                    print(AstPrinter().print_all(statements))

                else:
                    sess.add(sess.source)
                    sess.run()

    except SystemExit as exc:
        status.append(exc.code)
        return

    status.append(0)


def main():
    """Runs rulox interpreter. Called from rulox console script."""
    assert sys.version_info >= (3, 8), "rulox cannot be run with python < 3.8"

    parser = argparse.ArgumentParser(prog="rulox")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    dump = parser.add_mutually_exclusive_group()
    dump.add_argument("--tokens", help="print the tokens of file instead of running it", action="store_true")
    dump.add_argument("--ast", help="print the syntax tree of file instead of running it", action="store_true")
    args = parser.parse_args()

    if args.file is None and (args.tokens or args.ast):
        parser.error("--tokens and --ast need a file")

    threading.stack_size(STACK_SIZE)
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    status = []
    worker = threading.Thread(target=run, args=(args, status), daemon=True)
    with ErrorHandler():  # Ctrl-C arrives on this thread
        worker.start()
        worker.join()

    sys.exit(status[0] if status else 1)


if __name__ == "__main__":
    main()

"""Handles interactive/command-line mode for the rulox interpreter. Uses cmd as backend."""

import cmd

from rulox.lang.session import Session


class Shell(cmd.Cmd):
    """rulox interpreter shell."""
    intro = "rulox interpreter :: Python backend\nType 'help' for more information, 'exit' or Ctrl-D to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0
        self.start_line_num = 1  # line the unit being read started on

    def default(self, line):
        """Executes arbitrary rulox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self.start_line_num = self.line_num

            source = self._tmp_line + line
            if Session.is_incomplete(source):
                self._tmp_line = source + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if self.sess.add(source, self.start_line_num):
                self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the rulox interpreter!\n\n"
              "rulox is a small scripting language with C-like syntax and Russian keywords: \n"
              "переменная, функция, класс, если/иначе, пока, для, вернуть, вывести, \n"
              "правда, ложь, пусто, и, или, это, супер.\n\n"
              "Try it out by typing 'переменная x = 6 * 7;' and then 'вывести x;'. Blocks \n"
              "and calls may span several lines: the shell waits for the closing brace.")

    def emptyline(self):
        """Do not repeat previous command on empty line. Inside a continuation, the empty line is still source."""
        if self._tmp_line:
            return self.default("")
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True

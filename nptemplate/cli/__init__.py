#!/usr/bin/env python
# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from cleo import Application as BaseApplication
from clikit.api.args.format.argument import Argument
from clikit.api.args.format.option import Option
from clikit.api.event import PRE_HANDLE, PRE_RESOLVE
from clikit.api.formatter import Formatter
from clikit.api.formatter.style_set import StyleSet
from clikit.api.io import Input, Output
from clikit.api.io.flags import DEBUG, VERBOSE, VERY_VERBOSE
from clikit.api.io.input_stream import InputStream
from clikit.api.io.output_stream import OutputStream
from clikit.config import DefaultApplicationConfig
from clikit.formatter import AnsiFormatter, PlainFormatter
from clikit.handler.help import HelpTextHandler
from clikit.io.console_io import ConsoleIO
from clikit.io.input_stream import StandardInputStream
from clikit.io.output_stream import ErrorOutputStream, StandardOutputStream
from clikit.resolver.help_resolver import HelpResolver

from nptemplate import __version__
from nptemplate.cli.command.apply import ApplyCommand
from nptemplate.cli.command.fields import FieldsCommand
from nptemplate.cli.command.inspect import InspectCommand
from nptemplate.cli.command.validate import ValidateCommand
from nptemplate.log import configure_logger

LOG_FORMAT = "<info>%(asctime)s</info> | <c1>%(levelname)-7s</c1> | <c2>%(name)s</c2> | %(message)s"
# most verbose first; without any of these, only errors are logged
VERBOSITY_LEVELS = [
    ("-vvv", DEBUG, "debug"),
    ("-vv", VERY_VERBOSE, "info"),
    ("-v", VERBOSE, "warning"),
]


class Application(BaseApplication):

    def __init__(self):
        config = ApplicationConfig()
        super().__init__(config=config)

        # add commands
        self.add(InspectCommand())
        self.add(FieldsCommand())
        self.add(ApplyCommand())
        self.add(ValidateCommand())


def create_formatter(output_stream: OutputStream, style_set: StyleSet) -> Formatter:
    if output_stream.supports_ansi():
        return AnsiFormatter(style_set)
    return PlainFormatter(style_set)


class ApplicationConfig(DefaultApplicationConfig):

    def __init__(self):
        super().__init__(name="nptemplate", version=__version__)

    def configure(self):
        self.set_io_factory(self.create_io)
        self.add_event_listener(PRE_RESOLVE, self.resolve_help_command)
        self.add_event_listener(PRE_HANDLE, self.print_version)

        self.add_option("help", "h", Option.NO_VALUE, "Display this help message")
        self.add_option(
            "verbose",
            "v",
            Option.NO_VALUE,
            "Increase the verbosity of messages: '-v' for warnings, '-vv' for info and '-vvv' for debug",
        )
        self.add_option("version", None, Option.NO_VALUE, "Display this application version")
        self.add_option("no-ansi", None, Option.NO_VALUE, "Disable ANSI output")
        self.add_option("config", "c", Option.REQUIRED_VALUE, "Path to configuration file.")

        with self.command("help") as c:
            c.default()
            c.set_description("Display the manual of a command")
            c.add_argument("command", Argument.OPTIONAL | Argument.MULTI_VALUED, "The command name")
            c.set_handler(HelpTextHandler(HelpResolver()))

    def create_io(self,
                  application,
                  args,
                  input_stream: InputStream = None,
                  output_stream: OutputStream = None,
                  error_stream: OutputStream = None) -> ConsoleIO:
        if input_stream is None:
            input_stream = StandardInputStream()
        if output_stream is None:
            output_stream = StandardOutputStream()
        if error_stream is None:
            error_stream = ErrorOutputStream()

        style_set = application.config.style_set

        if args.has_option_token("--no-ansi"):
            output_formatter = error_formatter = PlainFormatter(style_set)
        else:
            output_formatter = create_formatter(output_stream, style_set)
            error_formatter = create_formatter(error_stream, style_set)

        io = self.io_class(
            Input(input_stream),
            Output(output_stream, output_formatter),
            Output(error_stream, error_formatter),
        )

        log_level = "error"
        for token, verbosity, level in VERBOSITY_LEVELS:
            if args.has_option_token(token):
                io.set_verbosity(verbosity)
                log_level = level
                break
        configure_logger(log_level, LOG_FORMAT, io.error_output)

        return io


def main():
    application = Application()
    application.run()


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import logging
import os
import subprocess
import sys

import click
from benchjunit.lib.config import Config
from benchjunit.lib.parser import ParseError
from benchjunit.lib.parser_factory import ParserFactory
from benchjunit.lib.reporter_factory import ReporterFactory
from benchjunit.lib.runner import BenchmarkRunner


logger = logging.getLogger(__name__)


def write_report(config: Config, output: str):
    """Translate benchmark output and write the report where config says.

    Exits with status 1, without writing anything, if the output can't be
    parsed.
    """
    parser = ParserFactory.create(
        config.parser, failure_text_limit=config.failure_text_limit
    )
    try:
        suites = parser.parse(output)
    except ParseError as e:
        logger.error("Error parsing 'go test' output: %s", e)
        logger.error("Output:\n%s", output)
        sys.exit(1)

    logger.info("Writing %s report to %s", config.format, config.output)
    with click.open_file(config.output, "w") as stream:
        reporter = ReporterFactory.create(config.format, stream)
        reporter.report(suites)
        reporter.close()
    logger.info("Successfully generated report for {} package(s)".format(len(suites)))


@click.group()
@click.option("-v", "--verbose", count=True, default=0)
@click.option(
    "-c",
    "--config",
    type=click.File("r"),
    default=lambda: os.environ.get("BENCHJUNIT_CONFIG"),
    help="YAML config file",
)
@click.pass_context
def benchjunit(ctx, verbose, config):
    """Translate go benchmark output into JUnit XML."""
    ctx.ensure_object(dict)

    # warn is 30, should default to 30 when verbose=0
    # each level below warning is 10 less than the previous
    log_level = max(verbose * (-10) + 30, logging.DEBUG)
    logging.basicConfig(format="%(levelname)s:%(name)s: %(message)s", level=log_level)

    try:
        cfg = Config.load(config) if config else Config()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config")
    if cfg.format not in ReporterFactory.registered_names:
        raise click.BadParameter(f'unknown format "{cfg.format}"', param_hint="--config")
    if cfg.parser not in ParserFactory.registered_names:
        raise click.BadParameter(f'unknown parser "{cfg.parser}"', param_hint="--config")
    ctx.obj["config"] = cfg


def report_options(f):
    f = click.option(
        "--failure-text-limit",
        type=click.IntRange(min=0),
        help="max characters of failure text kept per benchmark",
    )(f)
    f = click.option(
        "-f",
        "--format",
        "fmt",
        type=click.Choice(ReporterFactory.registered_names),
        help="report format",
    )(f)
    f = click.option("-o", "--output", help="output file, '-' for stdout")(f)
    return f


@benchjunit.command()
@click.argument("packages", nargs=-1)
@report_options
@click.option(
    "-l", "--log-file", help="optional output file for complete go test output"
)
@click.option("--test-arg", "test_args", multiple=True, help="additional args for go test")
@click.option("--timeout", type=float, help="seconds before go test is killed")
@click.pass_context
def run(ctx, packages, output, fmt, failure_text_limit, log_file, test_args, timeout):
    """Run go benchmarks in PACKAGES and report them."""
    config = ctx.obj["config"].merge(
        packages=packages,
        output=output,
        format=fmt,
        failure_text_limit=failure_text_limit,
        log_file=log_file,
        test_args=test_args,
        timeout=timeout,
    )
    if not config.packages:
        raise click.UsageError("no packages given on the command line or in config")

    runner = BenchmarkRunner(
        binary=config.go,
        test_args=config.test_args,
        timeout=config.timeout,
        log_file=config.log_file,
    )
    try:
        result = runner.run(config.packages)
    except (OSError, subprocess.TimeoutExpired):
        sys.exit(1)
    logger.info("Benchmarks completed. Generating report...")
    write_report(config, result.output)


@benchjunit.command()
@click.argument(
    "log", type=click.File("r", errors="backslashreplace"), default="-"
)
@report_options
@click.pass_context
def parse(ctx, log, output, fmt, failure_text_limit):
    """Report previously captured go benchmark output from LOG."""
    config = ctx.obj["config"].merge(
        output=output, format=fmt, failure_text_limit=failure_text_limit
    )
    logger.info('Reading benchmark output from "%s"', getattr(log, "name", "-"))
    write_report(config, log.read())


def main():
    benchjunit(obj={})

# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

# ruff: noqa: TRY400

"""Command-line interface for mkpw."""

from __future__ import annotations

import logging
import pathlib
from typing import TYPE_CHECKING, NoReturn

import click
from click.core import ParameterSource
from typing_extensions import Any

from mkpw import _internals, _types, recipe, separators
from mkpw._internals import cli_helpers, cli_machinery
from mkpw.capitalization import CapitalizationPolicy

if TYPE_CHECKING:
    from mkpw import wordlist

__all__ = ('mkpw',)

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION


def _validate_separator(
    ctx: click.Context,
    param: click.Parameter,
    value: Any,  # noqa: ANN401
) -> str:
    del ctx  # Unused.
    del param  # Unused.
    try:
        separators.SeparatorPolicy.from_name(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from None
    return value


class _MkpwContext:
    """The context for the "mkpw" command-line interface.

    Collects the settings from the command-line and the user
    configuration, and reports errors in a uniform manner.

    """

    def __init__(self, ctx: click.Context, /) -> None:
        self.ctx = ctx
        self.logger = logging.getLogger(PROG_NAME)

    def err(
        self,
        msg: Any,  # noqa: ANN401
        /,
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> NoReturn:
        """Log an error, then abort the function call.

        `msg` and `args` are interpreted as by [`logging.Logger.error`][].
        We ensure that color handling is done properly before the error
        is logged.

        """
        stacklevel = kwargs.pop('stacklevel', 1)
        stacklevel += 1
        extra = kwargs.pop('extra', {})
        extra.setdefault('color', self.ctx.color)
        self.logger.error(
            msg, *args, stacklevel=stacklevel, extra=extra, **kwargs
        )
        self.ctx.exit(1)

    def get_user_config(self) -> _types.UserConfig:
        """Return the user configuration stored on disk.

        If no configuration is stored, return an empty configuration.

        """
        try:
            return cli_helpers.load_user_config()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            self.err(
                'Cannot load user config: %s: %r',
                exc.strerror,
                exc.filename,
            )
        except (TypeError, ValueError) as exc:
            self.err('%s: %s', cli_helpers.INVALID_USER_CONFIG, exc)

    def setting(
        self,
        name: str,
        defaults: _types.UserConfigDefaults,
        /,
    ) -> Any:  # noqa: ANN401
        """Return the effective value of a setting.

        A value given on the command-line takes precedence over the
        user configuration, which takes precedence over the built-in
        default.

        """
        source = self.ctx.get_parameter_source(name)
        if source == ParameterSource.DEFAULT and name in defaults:
            return defaults[name]  # type: ignore[literal-required]
        return self.ctx.params[name]

    def separator_policy(self, name: str, /) -> separators.SeparatorPolicy:
        try:
            return separators.SeparatorPolicy.from_name(name)
        except ValueError as exc:
            self.err('%s: %s', cli_helpers.INVALID_USER_CONFIG, exc)

    def capitalization_policy(self, name: str, /) -> CapitalizationPolicy:
        try:
            return CapitalizationPolicy.from_name(name)
        except ValueError as exc:
            self.err('%s: %s', cli_helpers.INVALID_USER_CONFIG, exc)

    def word_list_path(
        self,
        defaults: _types.UserConfigDefaults,
        /,
    ) -> pathlib.Path | None:
        """Return the path of the requested word list, if any.

        Relative paths from the user configuration are relative to the
        configuration directory.

        """
        source = self.ctx.get_parameter_source('wordlist')
        if source == ParameterSource.DEFAULT and 'wordlist' in defaults:
            return cli_helpers.config_filename(subsystem=None) / (
                pathlib.Path(defaults['wordlist']).expanduser()
            )
        value = self.ctx.params['wordlist']
        return pathlib.Path(value) if value is not None else None

    def load_word_list(
        self,
        path: pathlib.Path | None,
        /,
        *,
        separator: separators.SeparatorPolicy,
    ) -> wordlist.WordList:
        try:
            return cli_helpers.load_word_list(path, separator=separator)
        except OSError as exc:
            self.err(
                'Cannot load word list: %s: %r',
                exc.strerror,
                exc.filename,
            )
        except UnicodeError as exc:
            self.err('Cannot load word list %r: %s', str(path), exc)
        except _types.GenerationError as exc:
            self.err('Cannot use word list: %s', exc)
        except ValueError as exc:
            self.err('Cannot load word list %r: %s', str(path), exc)


@click.command(
    cls=cli_machinery.TopLevelCLIEntryPoint,
    context_settings={'help_option_names': ['-h', '--help']},
    help='Generate a random passphrase from words of a word list.',
    epilog="""
        Configuration is read from config.toml in the directory named by
        the MKPW_PATH environment variable, or else in the default
        application directory.
    """,
)
@click.option(
    '-n',
    '--size',
    metavar='NUMBER',
    type=str,
    default=str(recipe.DEFAULT_SIZE),
    show_default=True,
    callback=cli_machinery.validate_size,
    help='Use NUMBER words in the passphrase.',
    cls=cli_machinery.PassphraseGenerationOption,
)
@click.option(
    '-s',
    '--separator',
    metavar='NAME',
    default='hyphen',
    show_default=True,
    callback=_validate_separator,
    help=(
        'Separate words by NAME: one of '
        + ', '.join(separators.SEPARATOR_PRESETS)
        + ', or a single literal character.'
    ),
    cls=cli_machinery.PassphraseGenerationOption,
)
@click.option(
    '-c',
    '--capitalize',
    type=click.Choice([c.value for c in CapitalizationPolicy]),
    default=CapitalizationPolicy.ONE.value,
    show_default=True,
    help='Capitalize words according to this scheme.',
    cls=cli_machinery.PassphraseGenerationOption,
)
@click.option(
    '-e',
    '--entropy',
    is_flag=True,
    help='Also show the entropy of the passphrase, in bits.',
    cls=cli_machinery.PassphraseGenerationOption,
)
@click.option(
    '-w',
    '--wordlist',
    metavar='PATH',
    type=click.Path(dir_okay=False),
    help='Draw words from the word list file PATH, one word per line.',
    cls=cli_machinery.ConfigurationOption,
)
@cli_machinery.version_option
@cli_machinery.standard_logging_options
@click.pass_context
def mkpw(
    ctx: click.Context,
    /,
    **kwargs: Any,  # noqa: ANN401
) -> None:
    """Generate a random passphrase from words of a word list.

    The words are drawn uniformly at random, using the operating
    system's cryptographically secure random number generator.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  (See
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    """
    del kwargs  # Accessed via the context instead.
    mkpw_ctx = _MkpwContext(ctx)
    defaults = mkpw_ctx.get_user_config().get('defaults', {})
    size = mkpw_ctx.setting('size', defaults)
    separator = mkpw_ctx.separator_policy(
        mkpw_ctx.setting('separator', defaults)
    )
    capitalization = mkpw_ctx.capitalization_policy(
        mkpw_ctx.setting('capitalize', defaults)
    )
    show_entropy = mkpw_ctx.setting('entropy', defaults)
    word_list = mkpw_ctx.load_word_list(
        mkpw_ctx.word_list_path(defaults), separator=separator
    )
    try:
        passphrase_recipe = recipe.Recipe(
            word_list,
            size,
            separator=separator,
            capitalization=capitalization,
        )
        mkpw_ctx.logger.info(
            'Using %d words from a list of %d, separator %s, '
            'capitalization %r: %.3f bits of entropy',
            passphrase_recipe.size,
            word_list.size(),
            separator.describe(),
            capitalization.value,
            passphrase_recipe.entropy,
            extra={'color': ctx.color},
        )
        password = recipe.generate(passphrase_recipe)
    except _types.GenerationError as exc:
        mkpw_ctx.err('Cannot generate passphrase: %s', exc)
    if show_entropy:
        click.echo(f'Password: {password.value}', color=ctx.color)
        click.echo(f'Entropy: {password.entropy:.3f}', color=ctx.color)
    else:
        click.echo(password.value, color=ctx.color)


if __name__ == '__main__':
    mkpw()

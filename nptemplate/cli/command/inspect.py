# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from nptemplate.cli.command import NanopubCommand
from nptemplate.errors import NanopubError
from nptemplate.log import get_child_logger
from nptemplate.store import CITATION_FORMATS, NanopubStore

log = get_child_logger("inspect")


class InspectCommand(NanopubCommand):
    """Show a nanopublication as Markdown, or a citation of it.

    inspect
        {source : File, URL or trusty hash of the nanopublication}
        {--citation= : Print a citation in the given format instead (apa, mla, chicago, bibtex)}
    """

    def __init__(self):
        super().__init__()
        self._add_options_from_schema()

    def handle(self):
        source = self.argument("source")
        citation = self.option("citation")
        if citation and citation not in CITATION_FORMATS:
            raise ValueError(f"Unknown citation format '{citation}', use one of: {', '.join(CITATION_FORMATS)}")

        config = self._load_config()
        try:
            store = self._load(NanopubStore, source, config)
        except NanopubError as e:
            log.error("failed to load '%s': %s", source, e)
            return 1

        self.write_raw(store.get_citation(citation) if citation else store.to_markdown())
        return 0

"""
ADR Parser
----------
Turns one ADR markdown document plus its location into an Adr record.

Steps (in order):
    1. Strip title + Metadata block and render the rest to HTML
    2. Number from the "NNNN-" filename prefix
    3. Id = "{repository}_{number}"
    4. Title from the first H1 of the original markdown
    5. Metadata table -> Date / Status / Deciders / Supersedes / Superseded by
    6. Context / Decision / Consequences section bodies

Every field has a fallback, so a malformed document still becomes a record.
The parser keeps no per-call state; one instance can be shared freely.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from adr_registry.parsing import metadata, references, sections
from adr_registry.parsing.metadata import MetadataTable
from adr_registry.parsing.renderer import MarkdownRenderer
from adr_registry.schemas import DEFAULT_NUMBER, Adr

_NUMBER_PATTERN = re.compile(r"^(\d{4})-")


class AdrParser:
    """Parses ADR markdown files into Adr records."""

    def __init__(self, renderer: MarkdownRenderer | None = None) -> None:
        self.renderer = renderer or MarkdownRenderer()

    def parse(
        self,
        markdown: str,
        collection_name: str,
        collection_full_name: str,
        file_path: str,
        file_name: str,
        source_url: str,
    ) -> Adr:
        body = self.strip_title_and_metadata(markdown)
        number = self.extract_number(file_name)

        table = self.extract_metadata_table(markdown)

        return Adr(
            id=f"{collection_name}_{number}",
            number=number,
            title=self.extract_title(markdown),
            status=table.get("Status", "Unknown"),
            date=self.parse_date(table.get("Date", "")),
            deciders=self.parse_deciders(table.get("Deciders", "")),
            supersedes_id=self.parse_adr_reference(table.get("Supersedes", ""), collection_name),
            superseded_by_id=self.parse_adr_reference(
                table.get("Superseded by", ""), collection_name
            ),
            context=self.extract_section(markdown, "Context"),
            decision=self.extract_section(markdown, "Decision"),
            consequences=self.extract_section(markdown, "Consequences"),
            raw_content=markdown,
            rendered_body=self.renderer.render(body),
            repository_name=collection_name,
            repository_full_name=collection_full_name,
            file_path=file_path,
            source_url=source_url,
        )

    # --- Field extraction -------------------------------------------------------

    @staticmethod
    def extract_number(file_name: str) -> str:
        """0001-use-postgres.md -> 0001; names without the prefix -> 0000."""
        match = _NUMBER_PATTERN.match(file_name)
        return match.group(1) if match else DEFAULT_NUMBER

    @staticmethod
    def extract_title(markdown: str) -> str:
        return sections.extract_title(markdown)

    @staticmethod
    def extract_metadata_table(markdown: str) -> MetadataTable:
        return metadata.extract_metadata_table(markdown)

    @staticmethod
    def extract_section(markdown: str, section_name: str) -> str:
        return sections.extract_section(markdown, section_name)

    @staticmethod
    def strip_title_and_metadata(markdown: str) -> str:
        return sections.strip_title_and_metadata(markdown)

    @staticmethod
    def parse_date(value: str) -> Optional[date]:
        return metadata.parse_date(value)

    @staticmethod
    def parse_deciders(value: str) -> list[str]:
        return metadata.parse_deciders(value)

    @staticmethod
    def parse_adr_reference(reference: str, collection_name: str) -> Optional[str]:
        return references.parse_adr_reference(reference, collection_name)

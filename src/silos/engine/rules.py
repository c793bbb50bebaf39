# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Rule documents: the KDL schemas for generate snippets and refactor mutation collections.

A refactor rule looks like::

    description "rename function"
    mutation {
        expression "(function_declaration name: (identifier) @name) @root"
        substitute {
            literal "func "
            capture "name"
            literal "_renamed() {}"
        }
    }

A generate rule is a pair of top-level nodes, ``desc "..."`` and ``body "..."``.
"""

from __future__ import annotations

import logging

from pathlib import Path
from typing import Annotated, Any, Literal, NamedTuple

import kdl

from pydantic import Field

from silos._common import FROZEN_VERBATIM_CONFIG, BasedModel
from silos.exceptions import MalformedRuleError


logger = logging.getLogger(__name__)


class LiteralSubstitute(BasedModel):
    """Fixed text emitted verbatim."""

    model_config = FROZEN_VERBATIM_CONFIG

    kind: Literal["literal"] = "literal"
    text: str

    def render(self, captures: dict[str, str]) -> str:
        return self.text


class CaptureSubstitute(BasedModel):
    """The text bound to a named capture of the mutation's query match."""

    model_config = FROZEN_VERBATIM_CONFIG

    kind: Literal["capture"] = "capture"
    name: str

    def render(self, captures: dict[str, str]) -> str:
        # an unbound capture renders empty; optional captures are allowed
        return captures.get(self.name, "")


Substitute = Annotated[LiteralSubstitute | CaptureSubstitute, Field(discriminator="kind")]


class Mutation(BasedModel):
    """One structural find-and-rewrite: a query expression plus an ordered substitution recipe."""

    model_config = FROZEN_VERBATIM_CONFIG

    expression: str
    """Tree-sitter query text. It should bind a `root` capture marking the replaced span."""
    substitute: tuple[Substitute, ...] = ()
    """Pieces concatenated, in order, to form the replacement text."""

    def rewrite(self, captures: dict[str, str]) -> str:
        """Build the replacement text from a match's captures."""
        return "".join(piece.render(captures) for piece in self.substitute)


class MutationCollection(BasedModel):
    """A named, ordered set of mutations representing one refactor intent."""

    model_config = FROZEN_VERBATIM_CONFIG

    description: str = Field(min_length=1)
    """The text that is embedded and searched for."""
    mutations: tuple[Mutation, ...] = ()
    """Mutations in document order. Order decides ties between rewrites at one offset."""


class SnippetRule(NamedTuple):
    """A generate rule: a description and the snippet returned when it is the closest match."""

    description: str
    body: str


def _value(value: Any) -> Any:
    # tagged KDL values wrap their native value
    return getattr(value, "value", value)


def _string_arg(node: kdl.Node, context: str) -> str:
    if not node.args:
        raise MalformedRuleError(f"`{node.name}` in {context} needs a string argument")
    value = _value(node.args[0])
    if not isinstance(value, str):
        raise MalformedRuleError(
            f"`{node.name}` in {context} must have a string argument, got {type(value).__name__}"
        )
    return value


def _child(node: kdl.Node, name: str) -> kdl.Node | None:
    return next((child for child in node.nodes if child.name == name), None)


def _compile_substitute(node: kdl.Node) -> tuple[Substitute, ...]:
    pieces: list[Substitute] = []
    for child in node.nodes:
        match child.name:
            case "literal":
                pieces.append(LiteralSubstitute(text=_string_arg(child, "substitute")))
            case "capture":
                pieces.append(CaptureSubstitute(name=_string_arg(child, "substitute")))
            case other:
                raise MalformedRuleError(
                    f"substitute entries must be `literal` or `capture`, got `{other}`"
                )
    return tuple(pieces)


def _compile_mutation(node: kdl.Node) -> Mutation:
    expression = _child(node, "expression")
    if expression is None:
        raise MalformedRuleError("mutation node must contain an `expression`")
    substitute = _child(node, "substitute")
    if substitute is None:
        raise MalformedRuleError("mutation node must contain a `substitute`")
    return Mutation(
        expression=_string_arg(expression, "mutation"),
        substitute=_compile_substitute(substitute),
    )


def compile(document: kdl.Document) -> MutationCollection:  # noqa: A001
    """Compile a parsed refactor rule document into a `MutationCollection`.

    Raises:
        MalformedRuleError: the document does not follow the refactor rule schema
    """
    description: str | None = None
    mutations: list[Mutation] = []
    for node in document.nodes:
        match node.name:
            case "description":
                if description is not None:
                    raise MalformedRuleError("a rule may only have one `description`")
                description = _string_arg(node, "the document root")
            case "mutation":
                mutations.append(_compile_mutation(node))
            case other:
                raise MalformedRuleError(
                    "document root must only contain `mutation` or `description` nodes: "
                    f"got `{other}`"
                )
    if not description:
        raise MalformedRuleError("mutation collection contains no `description`")
    if not mutations:
        logger.warning("Rule %r has no mutations and will never change its input", description)
    return MutationCollection(description=description, mutations=tuple(mutations))


def parse_document(text: str, *, source: str | Path | None = None) -> kdl.Document:
    """Parse KDL text, raising `MalformedRuleError` on syntax errors."""
    try:
        return kdl.parse(text)
    except kdl.ParseError as e:
        raise MalformedRuleError(
            f"failed to parse KDL: {e}",
            details={"file_path": str(source)} if source else None,
        ) from e


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedRuleError(
            "rule file is not valid UTF-8", details={"file_path": str(path)}
        ) from e


def parse_refactor_rule(text: str, *, source: str | Path | None = None) -> MutationCollection:
    """Parse and compile refactor rule text."""
    try:
        return compile(parse_document(text, source=source))
    except MalformedRuleError as e:
        if source and "file_path" not in e.details:
            e.details["file_path"] = str(source)
        raise


def load_refactor_rule(path: str | Path) -> MutationCollection:
    """Read and compile a refactor rule file."""
    path = Path(path)
    return parse_refactor_rule(_read(path), source=path)


def parse_generate_rule(text: str, *, source: str | Path | None = None) -> SnippetRule:
    """Parse generate rule text into its `desc` and `body`."""
    document = parse_document(text, source=source)
    found: dict[str, str] = {}
    for name in ("desc", "body"):
        node = next((node for node in document.nodes if node.name == name), None)
        if node is None:
            raise MalformedRuleError(
                f"generate rule is missing `{name}`",
                details={"file_path": str(source)} if source else None,
            )
        found[name] = _string_arg(node, "the document root")
    return SnippetRule(description=found["desc"], body=found["body"])


def load_generate_rule(path: str | Path) -> SnippetRule:
    """Read a generate rule file."""
    path = Path(path)
    return parse_generate_rule(_read(path), source=path)


__all__ = (
    "CaptureSubstitute",
    "LiteralSubstitute",
    "Mutation",
    "MutationCollection",
    "SnippetRule",
    "Substitute",
    "compile",
    "load_generate_rule",
    "load_refactor_rule",
    "parse_document",
    "parse_generate_rule",
    "parse_refactor_rule",
)

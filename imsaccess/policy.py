"""
Repository policy documents.

A policy document is the resource policy attached to one registry
repository. The statement this package manages (identified by its Sid)
allows a fixed set of pull/push actions to a set of account principals.
Any other statement in the policy is carried through untouched.
"""

import copy
import json
import re
from collections.abc import Iterable
from typing import Any

from imsaccess.canonical import canonicalize
from imsaccess.exceptions import EncodingError

POLICY_VERSION = "2008-10-17"
STATEMENT_SID = "AllowCrossAccountPullPush"

POLICY_ACTIONS = (
    "ecr:BatchCheckLayerAvailability",
    "ecr:BatchGetImage",
    "ecr:CompleteLayerUpload",
    "ecr:GetDownloadUrlForLayer",
    "ecr:InitiateLayerUpload",
    "ecr:PutImage",
    "ecr:UploadLayerPart",
)

_ACCOUNT_ARN = re.compile(r"^arn:aws:iam::(?P<account>\d{12}|[^:/]+):root$")
_BARE_ACCOUNT = re.compile(r"^[^:/*\s]+$")


def account_arn(account: str) -> str:
    """Principal ARN for an account's root identity."""
    return f"arn:aws:iam::{account}:root"


def _principal_account(principal: str) -> str | None:
    """Account named by ``principal``, or None for roles, users, wildcards and the like."""
    match = _ACCOUNT_ARN.match(principal)
    if match:
        return match.group("account")
    if _BARE_ACCOUNT.match(principal):
        return principal
    return None


def _aws_principals(statement: dict[str, Any]) -> list[str] | None:
    principal = statement.get("Principal", {})
    if not isinstance(principal, dict):
        # "Principal": "*"
        return None

    aws = principal.get("AWS", [])
    if isinstance(aws, str):
        aws = [aws]
    if not isinstance(aws, list) or not all(isinstance(p, str) for p in aws):
        raise EncodingError("Policy 'Principal.AWS' must be a string or list of strings")
    return aws


class PolicyDocument:
    """
    The set of accounts allowed to pull from and push to a repository.

    A parsed document remembers its source text. Until a principal is
    actually added or removed, rendering returns that text byte for byte, so
    a no-op update writes back exactly what was read.

    Example:
        ```python
        doc = PolicyDocument.parse_policy_text(registry.get_policy("acme/api"))
        doc.add_principal("111122223333")
        registry.set_policy("acme/api", doc.render_policy_text())
        ```
    """

    def __init__(self, principals: Iterable[str] = ()) -> None:
        self._principals: set[str] = set(principals)
        # Non-account principals found in the managed statement, kept verbatim.
        self._other_principals: set[str] = set()
        self._statements: list[dict[str, Any]] = []
        self._version: Any = POLICY_VERSION
        self._source_text: str | None = None

    @property
    def principals(self) -> frozenset[str]:
        return frozenset(self._principals)

    @property
    def other_principals(self) -> frozenset[str]:
        return frozenset(self._other_principals)

    @property
    def statements(self) -> list[dict[str, Any]]:
        """Statements outside the managed one, as parsed."""
        return copy.deepcopy(self._statements)

    def add_principal(self, account: str) -> None:
        """Allow ``account``; adding an existing principal does nothing."""
        if account not in self._principals:
            self._principals.add(account)
            self._source_text = None

    def remove_principal(self, account: str) -> None:
        """Disallow ``account``; removing an absent principal does nothing."""
        if account in self._principals:
            self._principals.discard(account)
            self._source_text = None

    def to_dict(self) -> dict[str, Any]:
        statements = copy.deepcopy(self._statements)

        aws = sorted({account_arn(a) for a in self._principals} | self._other_principals)
        if aws:
            statements.append({
                "Sid": STATEMENT_SID,
                "Effect": "Allow",
                "Principal": {"AWS": aws},
                "Action": list(POLICY_ACTIONS),
            })

        return {"Version": self._version, "Statement": statements}

    def render_policy_text(self) -> str:
        """
        Serialize the document to canonical policy text.

        A document without statements renders to the empty string, which the
        registry treats as "no policy attached". An unmodified parsed
        document renders to its source text.

        Raises:
            EncodingError: If the document cannot be serialized
        """
        if self._source_text is not None:
            return self._source_text

        data = self.to_dict()
        if not data["Statement"]:
            return ""

        try:
            return canonicalize(data)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Cannot render policy document: {e}") from e

    @classmethod
    def parse_policy_text(cls, text: str | None) -> "PolicyDocument":
        """
        Parse policy text as returned by the registry.

        Empty or missing text yields a document with no principals. In the
        managed statement, principals may be given as bare account ids or
        account root ARNs, either as a single string or a list; any other
        principal string is kept as it is. Statements with a different Sid
        are kept as they are and contribute no principals.

        Raises:
            EncodingError: If the text is not a well-formed policy document
        """
        if text is None or not text.strip():
            return cls()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise EncodingError(f"Policy text is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise EncodingError("Policy text must be a JSON object")

        statements = data.get("Statement", [])
        if isinstance(statements, dict):
            statements = [statements]
        if not isinstance(statements, list):
            raise EncodingError("Policy 'Statement' must be an object or a list")

        doc = cls()
        doc._version = data.get("Version", POLICY_VERSION)

        for statement in statements:
            if not isinstance(statement, dict):
                raise EncodingError("Policy statements must be objects")

            aws = _aws_principals(statement)
            if statement.get("Sid") != STATEMENT_SID:
                doc._statements.append(statement)
                continue
            if aws is None:
                raise EncodingError(f"Statement '{STATEMENT_SID}' must name AWS principals")

            for p in aws:
                account = _principal_account(p)
                if account is None:
                    doc._other_principals.add(p)
                else:
                    doc._principals.add(account)

        doc._source_text = text
        return doc

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PolicyDocument):
            return NotImplemented
        return (
            self._principals == other._principals
            and self._other_principals == other._other_principals
            and self._statements == other._statements
        )

    def __repr__(self) -> str:
        return f"PolicyDocument(principals={sorted(self._principals)!r})"

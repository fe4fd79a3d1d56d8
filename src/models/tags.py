"""
Tag selection model

A TagSelection decides, for any stack of open tag regions, whether the
text at that point is kept. It is parsed from expressions such as
'update_1', '!update_1', '**;!draft' or 'intro;setup'.

Wildcards:
    *   every tagged region (untagged text dropped)
    **  everything, tagged or not
    !*  only untagged text
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Sequence


@dataclass(frozen=True)
class TagSelection:
    """
    Included / excluded tag names plus wildcard flags

    Attributes:
        included: Tag names whose regions are kept
        excluded: Tag names whose regions are removed
        tagged: True for '*', False for '!*', None when neither is given
        everything: True for '**'
        also: Further selection that must agree (include-level tags= on top
              of the invocation selection)
    """
    included: FrozenSet[str] = frozenset()
    excluded: FrozenSet[str] = frozenset()
    tagged: Optional[bool] = None
    everything: bool = False
    also: Optional["TagSelection"] = None

    @classmethod
    def parse(cls, expression: Optional[str]) -> "TagSelection":
        """
        Parse a selection expression.

        Names are separated by ';' or ','; a leading '!' excludes.

        Example:
            >>> TagSelection.parse('intro;!update_1').excluded
            frozenset({'update_1'})
        """
        if not expression:
            return cls()
        included = set()
        excluded = set()
        tagged: Optional[bool] = None
        everything = False
        for raw in expression.replace(',', ';').split(';'):
            name = raw.strip()
            if not name:
                continue
            if name == '**':
                everything = True
            elif name == '*':
                tagged = True
            elif name == '!*':
                tagged = False
            elif name.startswith('!'):
                excluded.add(name[1:])
            else:
                included.add(name)
        return cls(
            included=frozenset(included),
            excluded=frozenset(excluded),
            tagged=tagged,
            everything=everything,
        )

    @classmethod
    def exclude(cls, names: Iterable[str]) -> "TagSelection":
        return cls(excluded=frozenset(names))

    @property
    def is_empty(self) -> bool:
        own = not (self.included or self.excluded or self.everything) and self.tagged is None
        return own and (self.also is None or self.also.is_empty)

    @property
    def names(self) -> FrozenSet[str]:
        """Every tag name mentioned explicitly, including chained selections"""
        own = self.included | self.excluded
        return own | self.also.names if self.also is not None else own

    def untagged_keep(self) -> bool:
        if self.everything:
            return True
        if self.tagged is not None:
            return not self.tagged
        return not self.included

    def own_decide(self, open_tags: Sequence[str]) -> bool:
        for tag in reversed(open_tags):
            if tag in self.excluded:
                return False
            if tag in self.included:
                return True
        if open_tags:
            if self.everything:
                return True
            if self.tagged is not None:
                return self.tagged
        return self.untagged_keep()

    def decide(self, open_tags: Sequence[str]) -> bool:
        """
        Decide whether text inside the given open tags is kept.

        The innermost tag mentioned by the selection wins. Content in
        unmentioned tags follows the wildcard, then the untagged rule.

        Args:
            open_tags: Tag names currently open, outermost first

        Returns:
            True if the text is kept
        """
        if not self.own_decide(open_tags):
            return False
        return self.also is None or self.also.decide(open_tags)

    def intersect(self, other: Optional["TagSelection"]) -> "TagSelection":
        """Return a selection that keeps text only when both selections keep it"""
        if other is None or other.is_empty:
            return self
        if self.is_empty:
            return other
        if self.also is None:
            return TagSelection(self.included, self.excluded, self.tagged, self.everything, other)
        return TagSelection(self.included, self.excluded, self.tagged, self.everything, self.also.intersect(other))

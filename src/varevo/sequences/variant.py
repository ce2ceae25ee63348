"""
Variant sequences stored as a reference plus an ordered list of edits.

A :class:`VariantSequence` never copies the reference. Every reference base is
either untouched, replaced by a string of one or more characters (a
substitution, possibly followed by inserted bases), or part of a deleted run.
Each replaced base or deleted run is one :class:`MutationRecord`.

Invariants of ``VariantSequence.mutations``:

* records are strictly ascending by ``old_pos`` and their reference ranges do
  not overlap;
* ``new_pos[i] == old_pos[i] + sum(size_modifier[:i])``;
* a non-deletion record has ``size_modifier == len(content) - 1``;
* no two deletion records are adjacent on the reference.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, replace
from typing import Optional

from ..exceptions import InvalidInputError, InvariantViolationError, OutOfRangeError
from .reference import ReferenceSequence, check_nucleotides


@dataclass
class MutationRecord:
    """
    One edit of the reference.

    Attributes
    ----------
    size_modifier : int
        Change in sequence length: 0 for a substitution, +k when k bases are
        inserted, -k for a deletion of k bases
    old_pos : int
        Position on the reference
    new_pos : int
        Position on the variant
    content : str
        What reference base ``old_pos`` turned into. One character for a
        substitution, the base followed by the k inserted bases for an
        insertion, empty for a deletion.
    """

    size_modifier: int
    old_pos: int
    new_pos: int
    content: str = ""

    @property
    def is_deletion(self) -> bool:
        return self.size_modifier < 0

    @property
    def is_insertion(self) -> bool:
        return self.size_modifier > 0

    @property
    def is_substitution(self) -> bool:
        return self.size_modifier == 0

    @property
    def kind(self) -> str:
        if self.size_modifier < 0:
            return "deletion"
        if self.size_modifier > 0:
            return "insertion"
        return "substitution"

    @property
    def inserted(self) -> str:
        """Bases added after the reference base (empty unless an insertion)."""
        return self.content[1:] if self.size_modifier > 0 else ""

    @property
    def ref_end(self) -> int:
        """Exclusive end of the reference range this record covers."""
        if self.size_modifier < 0:
            return self.old_pos - self.size_modifier
        return self.old_pos + 1


def _new_pos(m: MutationRecord) -> int:
    return m.new_pos


def _old_pos(m: MutationRecord) -> int:
    return m.old_pos


class VariantSequence:
    """
    One evolving lineage of a reference sequence.

    Parameters
    ----------
    reference : ReferenceSequence
        Shared, read-only reference
    name : str, optional
        Variant name (defaults to the reference name)

    Notes
    -----
    Instances are not thread-safe. A variant must only be edited by the one
    worker that owns it.

    Examples
    --------
    >>> var = VariantSequence(ReferenceSequence("TCAG"))
    >>> var.add_substitution(0, 'G')
    >>> var.materialize(0, 4)
    'GCAG'
    """

    def __init__(self, reference: ReferenceSequence, name: Optional[str] = None):
        self.reference = reference
        self.name = name if name is not None else reference.name
        self.mutations: list[MutationRecord] = []
        self._size = len(reference)

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    # ------------------------------------------------------------------
    # Position lookup
    # ------------------------------------------------------------------

    def _check_pos(self, pos: int) -> None:
        if pos < 0 or pos >= self._size:
            raise OutOfRangeError(
                f"position {pos} out of range for variant of size {self._size}"
            )

    def _record_index(self, pos: int) -> int:
        """Index of the last record with ``new_pos <= pos`` (-1 if none)."""
        return bisect_right(self.mutations, pos, key=_new_pos) - 1

    def _shift_after(self, idx: int) -> int:
        """Cumulative size modifier up to and including record ``idx``."""
        if idx < 0:
            return 0
        m = self.mutations[idx]
        return m.new_pos - m.old_pos + m.size_modifier

    def _locate(self, pos: int) -> tuple[int, int, int]:
        """
        Resolve a variant position.

        Returns
        -------
        tuple
            ``(idx, ref_pos, offset)``: ``idx`` is the last record starting at
            or before ``pos``, ``ref_pos`` the reference base that produced
            ``pos`` and ``offset`` the index into that record's content, or -1
            if ``pos`` is an untouched reference base.
        """
        idx = self._record_index(pos)
        if idx >= 0:
            m = self.mutations[idx]
            offset = pos - m.new_pos
            if offset < len(m.content):
                return idx, m.old_pos, offset
        return idx, pos - self._shift_after(idx), -1

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def character_at(self, pos: int) -> str:
        """Nucleotide at variant position ``pos``."""
        self._check_pos(pos)
        idx, ref_pos, offset = self._locate(pos)
        if offset >= 0:
            return self.mutations[idx].content[offset]
        return self.reference.sequence[ref_pos]

    def __getitem__(self, pos: int) -> str:
        return self.character_at(pos)

    def materialize(self, start: int = 0, count: Optional[int] = None) -> str:
        """
        Build the variant substring ``[start, start + count)``.

        Parameters
        ----------
        start : int
            First variant position
        count : int, optional
            Number of characters; defaults to everything from ``start`` on

        Returns
        -------
        str
            The variant sequence over the requested range
        """
        if count is None:
            count = self._size - start
        if start < 0 or count < 0 or start + count > self._size:
            raise OutOfRangeError(
                f"range [{start}, {start + count}) out of range for variant of size {self._size}"
            )
        end = start + count
        if count == 0:
            return ""

        ref = self.reference.sequence
        muts = self.mutations
        n_muts = len(muts)
        pieces = []
        pos = start
        idx = self._record_index(pos)

        while pos < end:
            if idx >= 0:
                m = muts[idx]
                content_end = m.new_pos + len(m.content)
                if pos < content_end:
                    stop = min(content_end, end)
                    pieces.append(m.content[pos - m.new_pos:stop - m.new_pos])
                    pos = stop
                    continue
            # Untouched reference run up to the next record
            next_start = muts[idx + 1].new_pos if idx + 1 < n_muts else end
            stop = min(next_start, end)
            if stop > pos:
                shift = self._shift_after(idx)
                pieces.append(ref[pos - shift:stop - shift])
                pos = stop
            idx += 1

        return "".join(pieces)

    def __str__(self) -> str:
        return self.materialize()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_substitution(self, pos: int, nucleotide: str) -> None:
        """Replace the base at variant position ``pos`` with ``nucleotide``."""
        self._check_pos(pos)
        if len(nucleotide) != 1:
            raise InvalidInputError(f"substitution must be one character, got '{nucleotide}'")
        check_nucleotides(nucleotide, "substitution")

        idx, ref_pos, offset = self._locate(pos)
        if offset >= 0:
            m = self.mutations[idx]
            m.content = m.content[:offset] + nucleotide + m.content[offset + 1:]
            return
        self.mutations.insert(idx + 1, MutationRecord(0, ref_pos, pos, nucleotide))

    def add_insertion(self, pos: int, content: str) -> None:
        """
        Insert ``content`` immediately after the base at variant position ``pos``.

        All later records move ``len(content)`` positions downstream.
        """
        self._check_pos(pos)
        if not content:
            raise InvalidInputError("insertion content must not be empty")
        check_nucleotides(content, "insertion")
        k = len(content)

        idx, ref_pos, offset = self._locate(pos)
        if offset >= 0:
            m = self.mutations[idx]
            m.content = m.content[:offset + 1] + content + m.content[offset + 1:]
            m.size_modifier += k
            first_shifted = idx + 1
        else:
            self.mutations.insert(
                idx + 1,
                MutationRecord(k, ref_pos, pos, self.reference.sequence[ref_pos] + content),
            )
            first_shifted = idx + 2

        for m in self.mutations[first_shifted:]:
            m.new_pos += k
        self._size += k

    def add_deletion(self, pos: int, length: int) -> None:
        """
        Delete ``length`` bases starting at variant position ``pos``.

        Records inside the range disappear, records straddling its ends are
        trimmed, and deletions that end up adjacent are merged into one.

        Raises
        ------
        OutOfRangeError
            If the range runs past the end of the variant
        """
        if length < 0:
            raise InvalidInputError(f"deletion length must be non-negative, got {length}")
        if length == 0:
            return
        self._check_pos(pos)
        end = pos + length
        if end > self._size:
            raise OutOfRangeError(
                f"deletion [{pos}, {end}) runs past the end of variant of size {self._size}"
            )

        ref = self.reference.sequence
        muts = self.mutations

        first_idx, first_ref, first_off = self._locate(pos)
        last_idx, last_ref, last_off = self._locate(end - 1)

        if first_off >= 0:
            first_content = muts[first_idx].content
        else:
            first_content, first_off = ref[first_ref], 0
        if last_off >= 0:
            last_content = muts[last_idx].content
        else:
            last_content, last_off = ref[last_ref], 0

        # Everything anchored on reference bases first_ref..last_ref is rebuilt
        lo = bisect_left(muts, first_ref, key=_old_pos)
        hi = bisect_right(muts, last_ref, key=_old_pos)

        rebuilt: list[MutationRecord] = []
        if first_ref == last_ref:
            left = first_content[:first_off] + first_content[last_off + 1:]
            self._append_survivor(rebuilt, first_ref, left, ref)
        else:
            prefix = first_content[:first_off]
            suffix = last_content[last_off + 1:]
            del_start = first_ref + 1 if prefix else first_ref
            del_end = last_ref if suffix else last_ref + 1
            if prefix:
                self._append_survivor(rebuilt, first_ref, prefix, ref)
            if del_end > del_start:
                rebuilt.append(MutationRecord(del_start - del_end, del_start, 0))
            if suffix:
                self._append_survivor(rebuilt, last_ref, suffix, ref)

        muts[lo:hi] = rebuilt
        self._merge_deletions(max(lo - 1, 0), lo + len(rebuilt) + 1)
        self.recalculate_positions(max(lo - 1, 0))

    @staticmethod
    def _append_survivor(out: list, ref_pos: int, content: str, ref: str) -> None:
        """Record what is left of one reference base after a deletion."""
        if not content:
            out.append(MutationRecord(-1, ref_pos, 0))
        elif content != ref[ref_pos]:
            out.append(MutationRecord(len(content) - 1, ref_pos, 0, content))
        # A single surviving character equal to the reference needs no record

    def _merge_deletions(self, lo: int, hi: int) -> None:
        """Merge reference-adjacent deletion records within ``[lo, hi)``."""
        muts = self.mutations
        i = max(lo, 1)
        while i < min(hi, len(muts)):
            prev, cur = muts[i - 1], muts[i]
            if prev.size_modifier < 0 and cur.size_modifier < 0 and prev.ref_end == cur.old_pos:
                prev.size_modifier += cur.size_modifier
                del muts[i]
                hi -= 1
            else:
                i += 1

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def recalculate_positions(self, from_index: int = 0) -> None:
        """
        Recompute ``new_pos`` of every record from ``from_index`` on, and the
        total size, from ``old_pos`` and ``size_modifier`` alone.
        """
        muts = self.mutations
        if from_index < 0 or from_index > len(muts):
            raise OutOfRangeError(f"record index {from_index} out of range")
        shift = self._shift_after(from_index - 1)
        for m in muts[from_index:]:
            m.new_pos = m.old_pos + shift
            shift += m.size_modifier
        self._size = len(self.reference) + shift

    def merge(self, other: "VariantSequence", from_index: int = 0) -> int:
        """
        Append ``other``'s records from ``from_index`` onward to this variant.

        Used to fold a lineage that was mutated separately (downstream of
        this variant's last edit) back into it. Positions are re-derived
        relative to this variant.

        Returns
        -------
        int
            Change in this variant's size
        """
        if other.reference is not self.reference and other.reference != self.reference:
            raise InvalidInputError("cannot merge variants of different references")
        if from_index < 0 or from_index > len(other.mutations):
            raise OutOfRangeError(
                f"record index {from_index} out of range for {len(other.mutations)} records"
            )
        incoming = other.mutations[from_index:]
        if not incoming:
            return 0
        if self.mutations and incoming[0].old_pos < self.mutations[-1].ref_end:
            raise InvalidInputError(
                "merged records must start after the last record of this variant"
            )

        old_size = self._size
        start = len(self.mutations)
        self.mutations.extend(replace(m) for m in incoming)
        self._merge_deletions(start, start + 1)
        self.recalculate_positions(max(start - 1, 0))
        return self._size - old_size

    def check_invariants(self) -> None:
        """
        Verify the mutation-list invariants.

        Raises
        ------
        InvariantViolationError
            Describing the first broken invariant
        """
        ref_size = len(self.reference)
        shift = 0
        prev: Optional[MutationRecord] = None
        for i, m in enumerate(self.mutations):
            if prev is not None and m.old_pos < prev.ref_end:
                raise InvariantViolationError(
                    f"record {i} (old_pos={m.old_pos}) overlaps or precedes record {i - 1}"
                )
            if m.old_pos < 0 or m.ref_end > ref_size:
                raise InvariantViolationError(f"record {i} lies outside the reference")
            if m.new_pos != m.old_pos + shift:
                raise InvariantViolationError(
                    f"record {i} has new_pos={m.new_pos}, expected {m.old_pos + shift}"
                )
            if m.size_modifier < 0:
                if m.content:
                    raise InvariantViolationError(f"deletion record {i} carries content")
                if prev is not None and prev.size_modifier < 0 and prev.ref_end == m.old_pos:
                    raise InvariantViolationError(f"deletion records {i - 1} and {i} are adjacent")
            elif len(m.content) != m.size_modifier + 1:
                raise InvariantViolationError(
                    f"record {i} has {len(m.content)} characters but size_modifier={m.size_modifier}"
                )
            shift += m.size_modifier
            prev = m
        if self._size != ref_size + shift:
            raise InvariantViolationError(
                f"stored size {self._size} != reference size + modifiers ({ref_size + shift})"
            )

    def copy(self, name: Optional[str] = None) -> "VariantSequence":
        """Independent copy sharing the same reference."""
        new = VariantSequence(self.reference, name if name is not None else self.name)
        new.mutations = [replace(m) for m in self.mutations]
        new._size = self._size
        return new

    def __repr__(self) -> str:
        return (
            f"VariantSequence(name='{self.name}', size={self._size}, "
            f"n_mutations={len(self.mutations)})"
        )

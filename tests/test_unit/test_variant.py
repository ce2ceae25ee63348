"""Tests for edit-list variant sequences."""

import pytest
import numpy as np

from varevo.exceptions import InvalidInputError, InvariantViolationError, OutOfRangeError
from varevo.sequences.reference import ReferenceSequence
from varevo.sequences.variant import MutationRecord, VariantSequence
from varevo.sequences.variant_set import VariantSet


@pytest.fixture
def var(short_ref):
    return VariantSequence(short_ref, name="v")


class TestReading:
    """Reading unmutated and mutated variants."""

    def test_empty_history(self, var, short_ref):
        assert var.size() == len(short_ref) == 10
        assert var.materialize() == short_ref.sequence
        assert str(var) == "TCAGTCAGTC"
        assert var.mutations == []

    def test_default_name(self, short_ref):
        assert VariantSequence(short_ref).name == "short"

    def test_materialize_window(self, var):
        assert var.materialize(2, 4) == "AGTC"
        assert var.materialize(10, 0) == ""
        assert var.materialize(7) == "GTC"

    def test_materialize_out_of_range(self, var):
        with pytest.raises(OutOfRangeError):
            var.materialize(8, 5)
        with pytest.raises(OutOfRangeError):
            var.materialize(-1, 2)

    def test_character_at_out_of_range(self, var):
        with pytest.raises(OutOfRangeError):
            var.character_at(10)
        with pytest.raises(IndexError):
            var[-1]


class TestSubstitution:
    """Substitutions on untouched and already-mutated bases."""

    def test_single_substitution(self):
        var = VariantSequence(ReferenceSequence("TCAG"))
        var.add_substitution(0, 'G')

        assert var.materialize(0, 4) == "GCAG"
        assert var.mutations == [MutationRecord(0, 0, 0, 'G')]
        assert var.size() == 4

    def test_substitution_overwrites_record(self, var):
        var.add_substitution(3, 'A')
        var.add_substitution(3, 'C')
        assert len(var.mutations) == 1
        assert var.character_at(3) == 'C'

    def test_records_stay_sorted(self, var):
        for pos in (7, 2, 9, 0):
            var.add_substitution(pos, 'A')
        assert [m.old_pos for m in var.mutations] == [0, 2, 7, 9]
        var.check_invariants()

    def test_invalid_nucleotide(self, var):
        with pytest.raises(InvalidInputError):
            var.add_substitution(0, 'N')
        with pytest.raises(InvalidInputError):
            var.add_substitution(0, 'AC')

    def test_out_of_range(self, var):
        with pytest.raises(OutOfRangeError):
            var.add_substitution(10, 'A')


class TestInsertion:
    """Insertions after a base."""

    def test_insertion_after_base(self, var):
        var.add_insertion(1, "GG")

        assert str(var) == "TCGGAGTCAGTC"
        assert var.size() == 12
        m = var.mutations[0]
        assert (m.size_modifier, m.old_pos, m.new_pos, m.content) == (2, 1, 1, "CGG")
        assert m.is_insertion and m.kind == "insertion"
        assert m.inserted == "GG"

    def test_insertion_shifts_later_records(self, var):
        var.add_substitution(8, 'A')
        var.add_insertion(2, "TTT")
        assert var.mutations[1].new_pos == 11
        assert var.character_at(11) == 'A'
        var.check_invariants()

    def test_insertion_within_insertion(self, var):
        var.add_insertion(1, "GG")
        var.add_insertion(2, "A")

        assert str(var) == "TCGAGAGTCAGTC"
        assert len(var.mutations) == 1
        assert var.mutations[0].content == "CGAG"
        assert var.mutations[0].size_modifier == 3

    def test_insertion_at_last_base(self, var):
        var.add_insertion(9, "AA")
        assert str(var) == "TCAGTCAGTCAA"

    def test_empty_insertion(self, var):
        with pytest.raises(InvalidInputError):
            var.add_insertion(0, "")


class TestDeletion:
    """Deletions, including trimming and merging of records."""

    def test_zero_length_is_noop(self, var):
        var.add_deletion(3, 0)
        assert var.mutations == []
        assert var.size() == 10

    def test_simple_deletion(self, var):
        var.add_deletion(2, 3)
        assert str(var) == "TCCAGTC"
        assert var.mutations == [MutationRecord(-3, 2, 2)]
        assert var.mutations[0].ref_end == 5

    def test_delete_everything_after_substitution(self, var):
        var.add_substitution(5, 'A')
        var.add_deletion(0, 10)

        assert var.size() == 0
        assert var.materialize() == ""
        assert var.mutations == [MutationRecord(-10, 0, 0)]
        var.check_invariants()

    def test_adjacent_deletions_merge(self, var):
        var.add_deletion(2, 2)
        var.add_deletion(2, 2)

        assert var.mutations == [MutationRecord(-4, 2, 2)]
        assert str(var) == "TCAGTC"

    def test_halves_merge_into_one(self, var):
        var.add_deletion(0, 5)
        var.add_deletion(0, 5)

        assert var.mutations == [MutationRecord(-10, 0, 0)]
        assert var.size() == 0

    def test_adjacent_deletion_on_left_merges(self, var):
        var.add_deletion(4, 2)
        var.add_deletion(2, 2)

        assert var.mutations == [MutationRecord(-4, 2, 2)]

    def test_deletion_swallows_records(self, var):
        var.add_substitution(3, 'T')
        var.add_insertion(5, "GGG")
        var.add_deletion(1, 10)

        assert str(var) == "TTC"
        assert len(var.mutations) == 1
        var.check_invariants()

    def test_deletion_trims_insertion_tail(self, var):
        var.add_insertion(1, "GG")
        var.add_deletion(2, 3)

        assert str(var) == "TCGTCAGTC"
        assert var.mutations == [MutationRecord(-1, 2, 2)]

    def test_deletion_trims_insertion_head(self, var):
        var.add_insertion(1, "GG")
        var.add_deletion(0, 2)

        assert str(var) == "GGAGTCAGTC"
        assert [m.kind for m in var.mutations] == ["deletion", "insertion"]
        assert var.mutations[1].content == "GG"
        var.check_invariants()

    def test_deletion_inside_insertion(self, var):
        var.add_insertion(1, "GGA")
        var.add_deletion(3, 2)

        assert str(var) == "TCGAGTCAGTC"
        assert var.mutations[0].content == "CG"

    def test_deletion_past_end(self, var):
        with pytest.raises(OutOfRangeError):
            var.add_deletion(8, 3)

    def test_negative_length(self, var):
        with pytest.raises(InvalidInputError):
            var.add_deletion(0, -1)


class TestAgainstPlainString:
    """Random edits compared with the same edits on a plain string."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_random_edits(self, long_ref, seed):
        rng = np.random.default_rng(seed)
        var = VariantSequence(long_ref)
        expected = long_ref.sequence

        for _ in range(400):
            size = len(expected)
            pos = int(rng.integers(size))
            op = rng.random() if size > 20 else 0.5

            if op < 0.4:
                nt = "TCAG"[rng.integers(4)]
                var.add_substitution(pos, nt)
                expected = expected[:pos] + nt + expected[pos + 1:]
            elif op < 0.7:
                content = "".join(rng.choice(list("TCAG"), size=int(rng.integers(1, 6))))
                var.add_insertion(pos, content)
                expected = expected[:pos + 1] + content + expected[pos + 1:]
            else:
                length = min(int(rng.integers(1, 8)), size - pos)
                var.add_deletion(pos, length)
                expected = expected[:pos] + expected[pos + length:]

            assert var.size() == len(expected)
            var.check_invariants()

        assert var.materialize() == expected
        for _ in range(50):
            start = int(rng.integers(len(expected)))
            count = int(rng.integers(len(expected) - start + 1))
            assert var.materialize(start, count) == expected[start:start + count]
            assert var.character_at(start) == expected[start]


class TestBookkeeping:
    """Position recalculation, invariant checks, merging and copying."""

    def test_recalculate_positions(self, var):
        var.add_insertion(1, "AA")
        var.add_deletion(6, 2)
        var.add_substitution(9, 'G')
        snapshot = [m.new_pos for m in var.mutations]
        size = var.size()

        for m in var.mutations:
            m.new_pos = 0
        var._size = 0
        var.recalculate_positions()

        assert [m.new_pos for m in var.mutations] == snapshot
        assert var.size() == size

    def test_check_invariants_detects_bad_position(self, var):
        var.add_substitution(2, 'T')
        var.add_substitution(6, 'T')
        var.mutations[1].new_pos += 1
        with pytest.raises(InvariantViolationError, match="new_pos"):
            var.check_invariants()

    def test_check_invariants_detects_disorder(self, var):
        var.add_substitution(2, 'T')
        var.add_substitution(6, 'T')
        var.mutations.reverse()
        with pytest.raises(InvariantViolationError):
            var.check_invariants()

    def test_check_invariants_detects_unmerged_deletions(self, short_ref):
        var = VariantSequence(short_ref)
        var.mutations = [MutationRecord(-2, 2, 2), MutationRecord(-1, 4, 2)]
        var._size = 7
        with pytest.raises(InvariantViolationError, match="adjacent"):
            var.check_invariants()

    def test_merge(self, var):
        var.add_substitution(1, 'A')
        other = var.copy()
        other.add_insertion(5, "GG")
        other.add_deletion(9, 2)

        change = var.merge(other, from_index=1)

        assert change == 0
        assert str(var) == str(other)
        var.check_invariants()
        # Records are copied, not shared
        assert var.mutations[1] is not other.mutations[1]

    def test_merge_joins_adjacent_deletions(self, var):
        """An incoming deletion adjacent to this variant's last one is folded into it."""
        var.add_deletion(2, 2)  # reference [2, 4)
        other = VariantSequence(var.reference)
        other.add_substitution(0, 'G')
        other.add_deletion(4, 3)  # reference [4, 7)
        other.add_substitution(5, 'A')  # reference 8

        change = var.merge(other, from_index=1)

        assert change == -3
        assert var.mutations == [MutationRecord(-5, 2, 2), MutationRecord(0, 8, 3, 'A')]
        assert str(var) == "TCGAC"
        assert var.size() == 5
        var.check_invariants()

    def test_merge_nothing(self, var):
        assert var.merge(var.copy()) == 0

    def test_merge_rejects_overlap(self, var):
        var.add_substitution(5, 'A')
        other = VariantSequence(var.reference)
        other.add_substitution(3, 'A')
        with pytest.raises(InvalidInputError):
            var.merge(other)

    def test_merge_rejects_other_reference(self, var):
        other = VariantSequence(ReferenceSequence("TTTT"))
        other.add_substitution(0, 'A')
        with pytest.raises(InvalidInputError):
            var.merge(other)

    def test_copy_is_independent(self, var):
        var.add_substitution(0, 'G')
        dup = var.copy(name="dup")
        dup.add_deletion(0, 5)

        assert dup.name == "dup"
        assert str(var) == "GCAGTCAGTC"
        assert var.size() == 10


class TestVariantSet:
    """Test suite for VariantSet."""

    def test_default_names(self, short_ref):
        vs = VariantSet(short_ref, n_variants=3)
        assert vs.names == ["var0", "var1", "var2"]
        assert len(vs) == 3
        assert all(v.reference is short_ref for v in vs)

    def test_variants_independent(self, short_ref):
        vs = VariantSet(short_ref, n_variants=2)
        vs[0].add_deletion(0, 4)
        assert vs.sizes() == [6, 10]
        assert vs.min_size() == 6

    def test_add_variant(self, short_ref):
        vs = VariantSet(short_ref, names=["a"])
        vs.add_variant("b")
        vs.add_variant()
        assert vs.names == ["a", "b", "var2"]
        with pytest.raises(InvalidInputError):
            vs.add_variant("a")

    def test_duplicate_names(self, short_ref):
        with pytest.raises(InvalidInputError):
            VariantSet(short_ref, names=["x", "x"])

    def test_empty_set(self, short_ref):
        vs = VariantSet(short_ref)
        with pytest.raises(OutOfRangeError):
            vs.min_size()

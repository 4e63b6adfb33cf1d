"""
Unit tests for protein alignment parsing.
"""

import numpy as np
import pytest

from protmodelfinder.exceptions import AlignmentFormatError
from protmodelfinder.io.sequences import Alignment, AMINO_ACIDS, AA_TO_INDEX, UNKNOWN_CODE


class TestPhylipParsing:
    """Test PHYLIP format sequence parsing."""

    def test_parse_small_alignment(self, small_alignment_file):
        aln = Alignment.from_phylip(small_alignment_file)

        assert aln.n_species == 4
        assert aln.n_sites == 60
        assert aln.names == ["seqA", "seqB", "seqC", "seqD"]
        assert aln.path == small_alignment_file
        assert aln.sequences.dtype == np.int8
        assert aln.sequences.shape == (4, 60)
        assert aln.sequences[0, 0] == AA_TO_INDEX["M"]

    def test_n_branches(self, small_alignment_file):
        aln = Alignment.from_phylip(small_alignment_file)
        assert aln.n_branches == 5

    def test_interleaved_blocks(self, tmp_path, small_alignment_file):
        """Later blocks are unnamed and follow the first block's order."""
        single = Alignment.from_phylip(small_alignment_file)
        records = [line.split() for line in small_alignment_file.read_text().splitlines()[1:]]

        path = tmp_path / "interleaved.phy"
        first_block = "\n".join(f"{name}      {seq[:30]}" for name, seq in records)
        second_block = "\n".join(seq[30:] for _, seq in records)
        path.write_text(f"4 60\n{first_block}\n\n{second_block}\n")
        aln = Alignment.from_phylip(path)

        assert aln.names == ["seqA", "seqB", "seqC", "seqD"]
        assert aln.n_sites == 60
        assert np.array_equal(aln.sequences, single.sequences)

    def test_interleaved_blocks_with_spaces(self, tmp_path):
        path = tmp_path / "spaced.phy"
        path.write_text(
            "3 12\n"
            "one   ACDEF G\n"
            "two   ACDEF G\n"
            "three ACDEF G\n"
            "HIK LMN\n"
            "HIK LMN\n"
            "HIK LMN\n"
        )
        aln = Alignment.from_phylip(path)

        assert aln.names == ["one", "two", "three"]
        assert aln.n_sites == 12
        assert np.array_equal(aln.sequences[0], aln.sequences[2])

    def test_incomplete_block(self, tmp_path):
        path = tmp_path / "ragged.phy"
        path.write_text("2 8\na ACDE\nb ACDE\nFGHI\n")
        with pytest.raises(AlignmentFormatError, match="Sequence b has length 4"):
            Alignment.from_phylip(path)

    def test_no_sequences_declared(self, tmp_path):
        path = tmp_path / "none.phy"
        path.write_text("0 4\nACDE\n")
        with pytest.raises(AlignmentFormatError, match="no sequences"):
            Alignment.from_phylip(path)

    def test_gaps_and_ambiguity_are_unknown(self, tmp_path):
        path = tmp_path / "gaps.phy"
        path.write_text("3 4\na AC-X\nb ACDE\nc acde\n")
        aln = Alignment.from_phylip(path)

        assert aln.sequences[0, 2] == UNKNOWN_CODE
        assert aln.sequences[0, 3] == UNKNOWN_CODE
        # lower case is accepted
        assert np.array_equal(aln.sequences[1], aln.sequences[2])

    def test_bad_header(self, tmp_path):
        path = tmp_path / "bad.phy"
        path.write_text(">seqA\nACDE\n")
        with pytest.raises(AlignmentFormatError, match="two integers"):
            Alignment.from_phylip(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.phy"
        path.write_text("")
        with pytest.raises(AlignmentFormatError):
            Alignment.from_phylip(path)

    def test_missing_sequences(self, tmp_path):
        path = tmp_path / "short.phy"
        path.write_text("3 4\na ACDE\nb ACDE\n")
        with pytest.raises(AlignmentFormatError, match="Expected 3 sequences"):
            Alignment.from_phylip(path)

    def test_too_many_sequences(self, tmp_path):
        path = tmp_path / "long.phy"
        path.write_text("2 4\na ACDE\nb ACDE\nc ACDE\n")
        with pytest.raises(AlignmentFormatError, match="more than"):
            Alignment.from_phylip(path)

    def test_wrong_length(self, tmp_path):
        path = tmp_path / "length.phy"
        path.write_text("3 4\na ACDE\nb ACDEFG\nc ACDE\n")
        with pytest.raises(AlignmentFormatError, match="has length 6"):
            Alignment.from_phylip(path)


class TestAminoAcidFrequencies:
    """Test residue composition."""

    def test_frequencies_sum_to_one(self, small_alignment_file):
        freqs = Alignment.from_phylip(small_alignment_file).amino_acid_frequencies()

        assert list(freqs) == list(AMINO_ACIDS)
        assert np.isclose(sum(freqs.values()), 1.0)

    def test_gaps_ignored(self, tmp_path):
        path = tmp_path / "comp.phy"
        path.write_text("3 4\na AA--\nb AAXX\nc CC??\n")
        freqs = Alignment.from_phylip(path).amino_acid_frequencies()

        assert freqs["A"] == pytest.approx(4 / 6)
        assert freqs["C"] == pytest.approx(2 / 6)
        assert freqs["W"] == 0.0

    def test_no_standard_residues(self, tmp_path):
        path = tmp_path / "allgaps.phy"
        path.write_text("3 2\na --\nb --\nc XX\n")
        freqs = Alignment.from_phylip(path).amino_acid_frequencies()
        assert all(v == 0.0 for v in freqs.values())

    def test_too_few_sequences_for_tree(self, tmp_path):
        path = tmp_path / "two.phy"
        path.write_text("2 4\na ACDE\nb ACDE\n")
        aln = Alignment.from_phylip(path)
        with pytest.raises(ValueError, match="at least 3"):
            aln.n_branches

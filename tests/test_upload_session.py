"""
Tests for the upload session state machine.
"""

import pytest

from roastshare.media.errors import InvalidTransition, MediaErrorKind, UploadFailed
from roastshare.media.models import UploadStrategy
from roastshare.media.session import UploadPhase, UploadSession


def chunked(total=2500, chunk_size=1000):
    return UploadSession(total_bytes=total, strategy=UploadStrategy.CHUNKED, chunk_size=chunk_size)


class TestSegments:
    """Segment layout over the payload."""

    def test_segments_cover_payload_contiguously(self):
        session = chunked(total=2500, chunk_size=1000)

        segments = list(session.segments())

        assert segments == [(0, 0, 1000), (1, 1000, 2000), (2, 2000, 2500)]
        assert session.segment_count == 3

    def test_exact_multiple_has_no_empty_tail(self):
        session = chunked(total=3000, chunk_size=1000)

        assert [end - start for _, start, end in session.segments()] == [1000, 1000, 1000]

    def test_rejects_empty_payload(self):
        with pytest.raises(ValueError):
            UploadSession(total_bytes=0, strategy=UploadStrategy.SIMPLE)


class TestChunkedTransitions:
    """INIT → APPEND* → FINALIZE."""

    def test_full_pass(self):
        session = chunked()

        session.initialize("111")
        assert session.phase == UploadPhase.INITIALIZED

        for index, start, end in session.segments():
            session.append(index, end - start)
        assert session.phase == UploadPhase.CHUNKS_SENT
        assert session.bytes_sent == 2500

        session.finalize()
        assert session.phase == UploadPhase.FINALIZED
        assert session.is_complete
        assert session.require_pollable() == "111"

    def test_single_segment_goes_straight_to_chunks_sent(self):
        session = chunked(total=500, chunk_size=1000)
        session.initialize("111")

        session.append(0, 500)

        assert session.phase == UploadPhase.CHUNKS_SENT

    def test_append_before_init_rejected(self):
        session = chunked()

        with pytest.raises(InvalidTransition):
            session.append(0, 1000)

    def test_out_of_order_segment_rejected(self):
        session = chunked()
        session.initialize("111")

        with pytest.raises(InvalidTransition) as exc_info:
            session.append(1, 1000)

        assert "expected segment 0" in exc_info.value.detail

    def test_wrong_segment_length_rejected(self):
        session = chunked()
        session.initialize("111")

        with pytest.raises(InvalidTransition):
            session.append(0, 999)

    def test_finalize_before_all_chunks_rejected(self):
        session = chunked()
        session.initialize("111")
        session.append(0, 1000)

        with pytest.raises(InvalidTransition):
            session.finalize()

    def test_append_after_finalize_rejected(self):
        session = chunked(total=1000)
        session.initialize("111")
        session.append(0, 1000)
        session.finalize()

        with pytest.raises(InvalidTransition):
            session.append(1, 0)

    def test_second_init_rejected_and_media_id_unchanged(self):
        session = chunked()
        session.initialize("111")

        with pytest.raises(InvalidTransition):
            session.initialize("222")

        assert session.media_id == "111"

    def test_empty_media_id_rejected(self):
        session = chunked()

        with pytest.raises(InvalidTransition):
            session.initialize("")

    def test_simple_step_on_chunked_session_rejected(self):
        session = chunked()

        with pytest.raises(InvalidTransition):
            session.complete_simple("111")


class TestSimpleTransitions:
    """Single-shot uploads."""

    def test_complete_simple(self):
        session = UploadSession(total_bytes=1024, strategy=UploadStrategy.SIMPLE)

        session.complete_simple("999")

        assert session.phase == UploadPhase.UPLOADED
        assert session.bytes_sent == 1024
        assert session.require_pollable() == "999"

    def test_chunk_steps_on_simple_session_rejected(self):
        session = UploadSession(total_bytes=1024, strategy=UploadStrategy.SIMPLE)

        with pytest.raises(InvalidTransition):
            session.initialize("999")
        with pytest.raises(InvalidTransition):
            session.finalize()


class TestAbortAndPolling:
    """Dead sessions and the poll guard."""

    def test_poll_before_upload_completes_rejected(self):
        session = chunked()
        session.initialize("111")

        with pytest.raises(InvalidTransition) as exc_info:
            session.require_pollable()

        assert "initialized" in exc_info.value.detail

    def test_aborted_session_accepts_nothing(self):
        session = chunked()
        session.initialize("111")
        session.abort()

        assert session.phase == UploadPhase.ABORTED
        with pytest.raises(InvalidTransition):
            session.append(0, 1000)
        with pytest.raises(InvalidTransition):
            session.require_pollable()

    def test_abort_keeps_completed_session(self):
        session = UploadSession(total_bytes=10, strategy=UploadStrategy.SIMPLE)
        session.complete_simple("1")

        session.abort()

        assert session.phase == UploadPhase.UPLOADED

    def test_invalid_transition_is_an_upload_failure(self):
        session = chunked()

        with pytest.raises(UploadFailed) as exc_info:
            session.finalize()

        assert exc_info.value.kind == MediaErrorKind.UPLOAD

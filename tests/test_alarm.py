"""Tests for alarm tone synthesis and the AlarmPlayer API."""

import io
import wave

from tickdown.audio.alarm import AlarmPlayer, generate_alarm, SAMPLE_RATE, ALARM_FILENAME

from helpers import SignalCollector


class TestAlarmSynthesis:

    def test_produces_wav(self):
        data = generate_alarm()
        assert data[:4] == b"RIFF"
        assert data[8:12] == b"WAVE"

    def test_wav_is_parseable(self):
        with wave.open(io.BytesIO(generate_alarm()), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == SAMPLE_RATE
            duration = wf.getnframes() / SAMPLE_RATE
        assert 0.5 < duration < 2.0


class TestAlarmPlayer:

    def test_wav_cached(self, qapp, tmp_path):
        AlarmPlayer(sounds_dir=tmp_path)
        assert (tmp_path / ALARM_FILENAME).exists()

    def test_existing_wav_not_regenerated(self, qapp, tmp_path):
        path = tmp_path / ALARM_FILENAME
        path.write_bytes(generate_alarm())
        mtime = path.stat().st_mtime_ns
        AlarmPlayer(sounds_dir=tmp_path)
        assert path.stat().st_mtime_ns == mtime

    def test_default_dir_under_data_home(self, qapp, data_home):
        player = AlarmPlayer()
        assert player.wav_path == data_home / "sounds" / ALARM_FILENAME

    def test_start_and_stop(self, qapp, tmp_path):
        player = AlarmPlayer(sounds_dir=tmp_path)
        c = SignalCollector()
        player.ringing_changed.connect(c)

        player.start()
        assert player.is_ringing
        player.start()  # already ringing
        player.stop()
        assert not player.is_ringing
        player.stop()

        assert c.items == [True, False]

    def test_disabled_never_rings(self, qapp, tmp_path):
        player = AlarmPlayer(sounds_dir=tmp_path, enabled=False)
        player.start()
        assert not player.is_ringing

    def test_disabling_stops_ringing(self, qapp, tmp_path):
        player = AlarmPlayer(sounds_dir=tmp_path)
        player.start()
        player.set_enabled(False)
        assert not player.is_ringing
        assert not player.enabled

    def test_volume_clamped(self, qapp, tmp_path):
        player = AlarmPlayer(sounds_dir=tmp_path, volume=150)
        assert player.volume == 100
        player.set_volume(-5)
        assert player.volume == 0
        player.set_volume(45)
        assert player.volume == 45

    def test_unwritable_dir_is_silent(self, qapp, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        player = AlarmPlayer(sounds_dir=blocker / "sounds")
        player.start()
        assert player.is_ringing
        player.stop()

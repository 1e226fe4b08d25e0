from types import SimpleNamespace

from party_relay import socketio
from party_relay.services.party.heartbeat import HeartbeatSweeper
from party_relay.socketio_events import start_heartbeat


def test_sweep_probes_every_handle():
    probed = []
    sweeper = HeartbeatSweeper(30, lambda: ['a', 'b', 'c'], probed.append)
    assert sweeper.sweep() == 3
    assert probed == ['a', 'b', 'c']


def test_sweep_survives_failing_probe():
    probed = []

    def probe(handle):
        if handle == 'b':
            raise ConnectionError('closed')
        probed.append(handle)

    sweeper = HeartbeatSweeper(30, lambda: ['a', 'b', 'c'], probe)
    assert sweeper.sweep() == 2
    assert probed == ['a', 'c']


def test_run_sleeps_between_sweeps_until_stopped():
    probed = []
    sleeps = []
    sweeper = None

    def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 3:
            sweeper.stop()

    sweeper = HeartbeatSweeper(30, lambda: ['a'], probed.append, sleep=fake_sleep)
    sweeper.run()
    assert sleeps == [30, 30, 30]
    assert probed == ['a', 'a']


def test_no_sweeper_in_testing(relay):
    assert relay.sweeper is None


def test_open_connections_tracked(relay, connect):
    alice = connect()
    bob = connect()
    assert len(relay.open_sids()) == 2
    bob.disconnect(namespace='/ws')
    assert len(relay.open_sids()) == 1
    alice.disconnect(namespace='/ws')
    assert relay.open_sids() == []


def test_start_heartbeat_pings_connected_clients(relay, connect, monkeypatch):
    started = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda fn, *args: started.append(fn))
    live_app = SimpleNamespace(config={'TESTING': False, 'HEARTBEAT_INTERVAL_SEC': 5})

    start_heartbeat(live_app, relay)
    assert relay.sweeper is not None
    assert relay.sweeper.interval == 5
    assert started == [relay.sweeper.run]

    alice = connect()
    alice.get_received('/ws')  # flush
    assert relay.sweeper.sweep() == 1
    beats = [pkt for pkt in alice.get_received('/ws') if pkt['name'] == 'heartbeat']
    assert len(beats) == 1
    payload = beats[0]['args'][0] if isinstance(beats[0]['args'], list) else beats[0]['args']
    assert isinstance(payload['ts'], int)


def test_start_heartbeat_disabled_by_zero_interval(relay, monkeypatch):
    started = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda fn, *args: started.append(fn))
    start_heartbeat(SimpleNamespace(config={'TESTING': False, 'HEARTBEAT_INTERVAL_SEC': 0}), relay)
    assert relay.sweeper is None
    assert started == []

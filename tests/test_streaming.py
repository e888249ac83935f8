import asyncio
import json
from core.streaming import JobSession, ndjson_line


def test_ndjson_line_is_compact_and_newline_terminated():
    line = ndjson_line({"type": "progress", "payload": {"percent": 5}})
    assert line.endswith(b"\n")
    assert json.loads(line) == {"type": "progress", "payload": {"percent": 5}}
    assert b" " not in line


def test_followers_replay_history_then_receive_live_events():
    async def scenario():
        session = JobSession("j1")
        session.publish("log", {"message": "early"})

        async def collect():
            return [ev async for ev in session.follow()]

        follower = asyncio.create_task(collect())
        await asyncio.sleep(0)
        session.publish("progress", {"percent": 10})
        await asyncio.sleep(0)
        session.publish("done", {"percent": 100})
        session.publish("log", {"message": "ignored after done"})
        return await asyncio.wait_for(follower, timeout=1), session

    events, session = asyncio.run(scenario())
    assert [e["type"] for e in events] == ["log", "progress", "done"]
    assert events[0]["payload"]["message"] == "early"
    assert "ts" in events[1]["payload"]
    assert session.closed


def test_close_ends_idle_followers():
    async def scenario():
        session = JobSession("j2")

        async def collect():
            return [ev async for ev in session.follow()]

        follower = asyncio.create_task(collect())
        await asyncio.sleep(0)
        session.close()
        return await asyncio.wait_for(follower, timeout=1)

    assert asyncio.run(scenario()) == []

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from dipod.BACKEND.podman_client import PodmanClient


class SlowConnection:
    """Records how many calls overlap on one varlink connection."""

    def __init__(self):
        self.active = 0
        self.max_active = 0
        self.lock = threading.Lock()

    def ListImages(self):
        with self.lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.005)
        with self.lock:
            self.active -= 1
        return {"images": [{"id": "8a2f"}]}

    def PullImage(self, name, _more=False):
        for i in range(3):
            time.sleep(0.01)
            yield {"reply": {"logs": [f"{name} {i}\n"], "id": ""}}

    def close(self):
        pass


def test_stress_unary_calls_are_serialized():
    """
    100 concurrent list calls share one connection; they must never
    overlap on it.
    """
    connection = SlowConnection()
    client = PodmanClient("unix:/nonexistent/io.podman")
    client._open = lambda: connection

    start_time = time.time()
    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(lambda _: client.list_images(), range(100)))
    end_time = time.time()

    print(f"Served 100 list calls in {end_time - start_time:.2f}s")
    assert all(r == [{"id": "8a2f"}] for r in results)
    assert connection.max_active == 1


def test_stress_streams_do_not_block_unary_calls():
    shared = SlowConnection()
    client = PodmanClient("unix:/nonexistent/io.podman")
    client._open = lambda: SlowConnection()
    client._connection = shared

    streams = [client.pull_image(f"image{i}") for i in range(10)]
    with ThreadPoolExecutor(max_workers=10) as pool:
        pulled = pool.map(lambda s: [b.logs[0] for b in s], streams)
        # Unary calls proceed while every stream is in flight.
        assert client.list_images() == [{"id": "8a2f"}]
        pulled = list(pulled)

    assert pulled[3] == ["image3 0\n", "image3 1\n", "image3 2\n"]


def test_stress_concurrent_requests(app, fake_podman):
    """Many clients hitting the API at once all get complete answers."""

    def request(i):
        client = app.test_client()
        if i % 3 == 0:
            return client.get("/v1.26/images/json").status_code
        if i % 3 == 1:
            return client.get("/images/alpine:3.18/json").status_code
        response = client.post("/images/create", query_string={"fromImage": "alpine"})
        assert response.get_data(as_text=True).count("\n") == 3
        return response.status_code

    with ThreadPoolExecutor(max_workers=16) as pool:
        statuses = list(pool.map(request, range(150)))
    assert statuses == [200] * 150

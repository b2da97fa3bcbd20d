import math
import time

from fire import Fire

from pirain_client import RainClient, RainClientError

SERVER_URL = "http://localhost:9000"


def main(seconds=5, interval_ms=None, server_url=SERVER_URL):
    """Let it rain on a running server for a few seconds and watch Pi converge."""
    client = RainClient(server_url)
    try:
        client.start_rain(interval_ms)
        deadline = time.time() + seconds
        while time.time() < deadline:
            state = client.state()
            approx = state["approximation"]
            shown = "undefined" if approx is None else f"{approx:.5f}"
            print(f"drops={state['total']:>6}  pi~{shown}")
            time.sleep(0.5)
    except RainClientError as e:
        print(f"Rain client error: {e}")
        return
    finally:
        try:
            client.stop_rain()
        except RainClientError:
            pass

    approx = client.approximation()
    if not math.isnan(approx):
        print(f"\nFinal: {approx:.6f} (error {abs(approx - math.pi):.6f})")


Fire(main)

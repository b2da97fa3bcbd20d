from fire import Fire

from pirain_client import RainClient, RainClientError, RainConflictError

SERVER_URL = "http://localhost:9000"


def main(*sizes, server_url=SERVER_URL):
    """Add drops by hand, e.g. `python demo/1_drops.py 1 10 100 1000`."""
    client = RainClient(server_url)
    sizes = sizes or tuple(client.config()["drop_sizes"])
    for size in sizes:
        try:
            state = client.drop(int(size))
        except RainConflictError:
            print("It is raining; stop the rain before adding drops by hand.")
            return
        except RainClientError as e:
            print(f"Rain client error: {e}")
            return
        print(f"+{size} -> inside={state['inside']} outside={state['outside']} pi~{state['approximation']}")


Fire(main)

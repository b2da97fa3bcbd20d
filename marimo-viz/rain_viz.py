import marimo

__generated_with = "0.14.16"
app = marimo.App(width="medium")


@app.cell
def _():
    import math

    import matplotlib.pyplot as plt
    import pandas as pd
    import seaborn as sns

    from pirain_client import HistoryClient, RainClient

    return HistoryClient, RainClient, math, pd, plt, sns


@app.cell
def _():
    config = {
        "api_base": "http://localhost:9000",
    }
    return (config,)


@app.cell
def _(HistoryClient, RainClient, config):
    client = RainClient(config["api_base"])
    history = HistoryClient(config["api_base"])
    state = client.state()
    points = client.points()
    boundary = client.boundary()
    print(f"Raindrops: {state['total']}  inside: {state['inside']}  outside: {state['outside']}")
    print(f"Approximation of Pi: {state['approximation']}")
    return boundary, history, points


@app.cell
def _(pd, points):
    def to_frame(points):
        """One row per drop with its side of the boundary."""
        frames = []
        for side in ("inside", "outside"):
            frames.append(pd.DataFrame({"x": points[side]["x"], "y": points[side]["y"], "side": side}))
        return pd.concat(frames, ignore_index=True)

    drops = to_frame(points)
    return (drops,)


@app.cell
def _(boundary, drops, plt, sns):
    fig, ax = plt.subplots(figsize=(6, 6))
    if not drops.empty:
        sns.scatterplot(data=drops, x="x", y="y", hue="side", palette={"inside": "blue", "outside": "red"}, s=6, ax=ax)
    ax.plot([p[0] for p in boundary], [p[1] for p in boundary], color="black")
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal")
    ax.set_title("Raindrops")
    fig
    return


@app.cell
def _(history, math, pd, plt, sns):
    convergence = pd.DataFrame(history.convergence())
    fig2, ax2 = plt.subplots(figsize=(8, 4))
    if convergence.empty:
        ax2.set_title("No drops yet")
    else:
        sns.lineplot(data=convergence, x="total", y="approximation", ax=ax2)
        ax2.axhline(math.pi, color="black", linestyle="--", label="pi")
        ax2.set_xscale("log")
        ax2.set_title("Convergence of the approximation")
        ax2.legend()
    fig2
    return


if __name__ == "__main__":
    app.run()

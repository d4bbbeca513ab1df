import networkx as nx

from alias_errors import InvalidDistribution
from alias_sampler import DEFAULT_TOLERANCE, AliasTable


def build_graph(edge_list, directed=False):
    """Edges are (u, v) or (u, v, weight) tuples."""
    G = nx.DiGraph() if directed else nx.Graph()
    for edge in edge_list:
        if len(edge) == 3:
            G.add_edge(edge[0], edge[1], weight=edge[2])
        else:
            G.add_edge(edge[0], edge[1])
    return G


def preprocess_transition_tables(G, weight="weight",
                                 tolerance=DEFAULT_TOLERANCE):
    """
    Builds one alias table per node over its neighbours, each neighbour
    weighted by its edge weight. Edges without the attribute count as 1.

    Args:
        G (nx.Graph or nx.DiGraph): The routing graph.
        weight (str): Edge attribute holding the load weight.
        tolerance (float): Passed on to AliasTable.build.

    Returns:
        dict: node -> AliasTable over the neighbours of node. Nodes without
            outgoing edges are left out.
    """
    tables = {}
    for node in G.nodes():
        neighbors = list(G.neighbors(node))
        if not neighbors:
            continue
        raw = [G[node][nbr].get(weight, 1.0) for nbr in neighbors]
        total = sum(raw)
        if total <= 0:
            raise InvalidDistribution(
                f"Edges out of node {node!r} have total weight {total}."
                )
        tables[node] = AliasTable.build(
            neighbors, [w / total for w in raw], tolerance
            )
    return tables


def weighted_walk(tables, start_node, walk_length, rng):
    walk = [start_node]

    while len(walk) < walk_length:
        table = tables.get(walk[-1])
        if table is None:
            # dead end, e.g. a sink in a directed graph
            break
        walk.append(table.sample(rng))
    return walk


def simulate_walks(G, num_walks, walk_length, rng, weight="weight",
                   log_fn=None):
    """
    Runs `num_walks` rounds of walks, one walk from every node per round,
    visiting the start nodes in a shuffled order.

    Args:
        rng: random.Random or numpy.random.Generator, used both for the
            shuffles and for every hop.
        log_fn (callable): Optional, e.g. diagnostics.get_logger(...). Gets
            one summary record per run.
    """
    tables = preprocess_transition_tables(G, weight)
    nodes = list(G.nodes())
    walks = []

    for _ in range(num_walks):
        rng.shuffle(nodes)
        for node in nodes:
            walk = weighted_walk(tables, node, walk_length, rng)
            walks.append(walk)

    if log_fn is not None:
        log_fn({
            "event": "simulate_walks",
            "num_nodes": len(nodes),
            "num_walks": len(walks),
            "walk_length": walk_length,
            "short_walks": sum(1 for w in walks if len(w) < walk_length),
        })
    return walks

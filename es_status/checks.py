from dataclasses import dataclass
from typing import Callable

from es_status.config import CheckName
from es_status.output import Color, as_text, color_for_status, kv, line
from es_status.stats import NoLocalNodeError, dig
from es_status.units import format_bytes

SEPARATOR = "-=" * 20

NODE_STATS_FLAGS = ["indices", "jvm", "process", "transport", "http"]


def _map(value):
    return value if isinstance(value, dict) else {}


def _count(value):
    # numbers only, anything else (missing, null, strings) counts as 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _human_size(tree, *path):
    """
    the human readable twin of a *_in_bytes field

    older clusters send 'heap_used' next to 'heap_used_in_bytes', newer ones only
    do that with ?human, so fall back to formatting the byte count ourselves
    """
    value = dig(tree, *path)
    if value is not None:
        return value
    raw = dig(tree, *path[:-1], path[-1] + "_in_bytes")
    if raw is None:
        return None
    return format_bytes(_count(raw))


def header(title):
    return [line(title, color=Color.CYAN), line(SEPARATOR, color=Color.CYAN)]


"""
curl 'http://localhost:9200/_cluster/health?pretty'
{
  "cluster_name" : "es-docker-cluster",
  "status" : "yellow",
  "timed_out" : false,
  "number_of_nodes" : 3,
  "number_of_data_nodes" : 2,
  "active_primary_shards" : 394,
  "active_shards" : 394,
  "relocating_shards" : 0,
  "initializing_shards" : 1,
  "unassigned_shards" : 2
}
"""
def check_health(stats):
    stats = _map(stats)
    status = stats.get("status")
    lines = [
        kv("name", stats.get("cluster_name"), color=Color.CYAN),
        kv("health", status, color=color_for_status(status)),
        kv("nodes", stats.get("number_of_nodes"), level=1),
    ]

    shard_states = [
        ("shards_unassigned", "unassigned_shards", Color.RED),
        ("shards_relocating", "relocating_shards", Color.MAGENTA),
        ("shards_initializing", "initializing_shards", Color.YELLOW),
    ]
    # a cluster that isn't green always shows where its shards are stuck
    for key, field_name, alarm in shard_states:
        if status != "green":
            lines.append(kv(key, stats.get(field_name), color=alarm))
        else:
            lines.append(kv(key, stats.get(field_name), level=1))
    return lines


"""
curl 'http://localhost:9200/_cluster/nodes/_local/stats?indices=true&jvm=true&process=true&transport=true&http=true&pretty'
{
  "cluster_name" : "es-docker-cluster",
  "nodes" : {
    "Keoat0M2TdSjM_Xx_d9QOQ" : {
      "name" : "es05",
      "indices" : {
        "store" : { "size" : "10.2gb", "size_in_bytes" : 10952166604 },
        "docs" : { "count" : 25238192, "deleted" : 780 }
      },
      "process" : { "open_file_descriptors" : 822 },
      "jvm" : {
        "threads" : { "count" : 161, "peak_count" : 170 },
        "mem" : {
          "heap_used" : "648mb", "heap_used_in_bytes" : 679477248,
          "heap_committed" : "3.8gb", "heap_committed_in_bytes" : 4080271360
        },
        "gc" : {
          "collection_count" : 5216, "collection_time" : "23.1m", "collection_time_in_millis" : 1386000,
          "collectors" : {
            "young" : { "collection_count" : 5210, "collection_time" : "22.9m", "collection_time_in_millis" : 1374000 },
            "old" : { "collection_count" : 6, "collection_time" : "12s", "collection_time_in_millis" : 12000 }
          }
        }
      },
      "transport" : {
        "rx_count" : 20746, "rx_size" : "5.9mb", "rx_size_in_bytes" : 6186598,
        "tx_count" : 20750, "tx_size" : "214.2kb", "tx_size_in_bytes" : 219340
      }
    }
  }
}
"""
def check_node(stats):
    nodes = dig(stats, "nodes")
    if not isinstance(nodes, dict) or not nodes:
        raise NoLocalNodeError("no local node found in node stats")
    # _local only ever answers for the node we talked to
    node = _map(next(iter(nodes.values())))

    lines = [
        kv("name", node.get("name"), color=Color.CYAN),
        kv("index_size", _human_size(node, "indices", "store", "size")),
        kv("index_size_bytes", dig(node, "indices", "store", "size_in_bytes"), level=1),
        kv("docs", dig(node, "indices", "docs", "count"), level=1),
        kv("open_fd", dig(node, "process", "open_file_descriptors")),
    ]

    jvm = _map(node.get("jvm"))
    lines += [
        kv("jvm", ""),
        kv("threads_current", dig(jvm, "threads", "count"), indent=1),
        kv("threads_peak", dig(jvm, "threads", "peak_count"), indent=1),
        kv("mem", "", indent=1),
        kv("heap_used", _human_size(jvm, "mem", "heap_used"), indent=2, color=Color.YELLOW),
        kv("heap_used_bytes", dig(jvm, "mem", "heap_used_in_bytes"), indent=2, color=Color.YELLOW, level=1),
        kv("heap_committed", _human_size(jvm, "mem", "heap_committed"), indent=2),
        kv("heap_committed_bytes", dig(jvm, "mem", "heap_committed_in_bytes"), indent=2, level=1),
        kv("gc", "", indent=1),
        kv("collections", dig(jvm, "gc", "collection_count"), indent=2),
        kv("time", dig(jvm, "gc", "collection_time"), indent=2),
        kv("time_ms", dig(jvm, "gc", "collection_time_in_millis"), indent=2, level=1),
    ]
    for collector, collector_stats in _map(dig(jvm, "gc", "collectors")).items():
        lines += [
            kv(collector, "", indent=2, level=1),
            kv("collections", dig(collector_stats, "collection_count"), indent=3, level=1),
            kv("time", dig(collector_stats, "collection_time"), indent=3, level=1),
            kv("time_ms", dig(collector_stats, "collection_time_in_millis"), indent=3, level=1),
        ]

    transport = _map(node.get("transport"))
    lines += [
        kv("requests", transport.get("rx_count")),
        kv("rx", _human_size(transport, "rx_size"), indent=1),
        kv("rx_bytes", transport.get("rx_size_in_bytes"), indent=1, level=1),
        kv("responses", transport.get("tx_count")),
        kv("tx", _human_size(transport, "tx_size"), indent=1),
        kv("tx_bytes", transport.get("tx_size_in_bytes"), indent=1, level=1),
    ]
    return lines


def _segment_sizes(segments):
    if isinstance(segments, dict):
        segments = segments.values()
    elif not isinstance(segments, list):
        return 0
    return sum(_count(dig(segment, "size_in_bytes")) for segment in segments)


"""
curl 'http://localhost:9200/_segments?pretty'
{
  "_shards" : { "total" : 4, "successful" : 4, "failed" : 0 },
  "indices" : {
    "mktorders-10005" : {
      "shards" : {
        "0" : [
          {
            "routing" : { "state" : "STARTED", "primary" : true, "node" : "Keoat0M2TdSjM_Xx_d9QOQ" },
            "num_committed_segments" : 2,
            "num_search_segments" : 2,
            "segments" : {
              "_0" : { "generation" : 0, "num_docs" : 33010, "size_in_bytes" : 10212345 },
              "_1" : { "generation" : 1, "num_docs" : 780, "size_in_bytes" : 212345 }
            }
          }
        ]
      }
    }
  }
}
"""
def check_segments(stats):
    lines = []
    for index, index_stats in _map(dig(stats, "indices")).items():
        lines.append(line("{}:".format(index), color=Color.CYAN))
        shards = 0
        segments = 0
        index_size = 0
        shard_map = _map(dig(index_stats, "shards"))
        for shard_id in sorted(shard_map):
            shards += 1
            lines.append(kv("shard", shard_id, indent=1, color=Color.MAGENTA, level=1))
            copies = shard_map[shard_id]
            # first copy listed is the one reported, same as the cluster's own ordering
            shard = _map(copies[0]) if isinstance(copies, list) and copies else _map(copies)
            num_segments = shard.get("num_search_segments")
            color = Color.YELLOW if _count(num_segments) > 1 else Color.GREEN
            segments += _count(num_segments)
            lines.append(kv("segments", num_segments, indent=2, color=color, level=1))

            size = _segment_sizes(shard.get("segments"))
            lines.append(kv("size_bytes", size, indent=2, level=2))
            lines.append(kv("size", format_bytes(size), indent=2, level=1))
            index_size += size

        ratio = "{:.2f}".format(segments / shards) if shards > 0 else "0"
        color = Color.GREEN if float(ratio) == 1 else Color.YELLOW
        lines.append(kv("segments_to_shards", ratio, indent=1, color=color))
        lines.append(kv("index_size", format_bytes(index_size), indent=1, level=1))
        lines.append(kv("index_size_bytes", index_size, indent=1, level=2))
    return lines


def _index_setting(settings, name):
    # flat_settings style first ("index.number_of_shards"), then nested
    flat = "index.{}".format(name)
    if settings.get(flat) is not None:
        return settings[flat]
    return dig(settings, "index", name)


def replicas_color(value):
    if value == "false":
        return Color.GREEN
    if value == "not set":
        return Color.YELLOW
    return Color.RED


"""
curl 'http://localhost:9200/_settings?pretty'
{
  "mktorders-10005" : {
    "settings" : {
      "index" : {
        "number_of_shards" : "1",
        "auto_expand_replicas" : "0-1",
        "number_of_replicas" : "1",
        "uuid" : "8v7y0mqtR1GcIlM2acmH1Q"
      }
    }
  }
}
"""
def check_settings(stats):
    stats = _map(stats)
    lines = []
    for index in sorted(stats):
        settings = _map(dig(stats[index], "settings"))
        lines.append(line("{}:".format(index), color=Color.CYAN))
        value = _index_setting(settings, "auto_expand_replicas")
        value = "not set" if value is None else as_text(value)
        lines.append(kv("auto_expand_replicas", value, indent=1, color=replicas_color(value)))
        lines.append(kv("replicas", _index_setting(settings, "number_of_replicas"), indent=1, level=1))
        lines.append(kv("shards", _index_setting(settings, "number_of_shards"), indent=1, level=1))
    return lines


@dataclass(frozen=True)
class Check:
    name: CheckName
    title: str
    path: str
    handler: Callable


CHECKS = {
    CheckName.HEALTH: Check(CheckName.HEALTH, "Cluster Health Check", "_cluster/health", check_health),
    CheckName.NODE: Check(
        CheckName.NODE,
        "Node Status Check",
        "_cluster/nodes/_local/stats?" + "&".join("{}=true".format(flag) for flag in NODE_STATS_FLAGS),
        check_node,
    ),
    CheckName.SEGMENTS: Check(CheckName.SEGMENTS, "Index Segmentation Check", "_segments", check_segments),
    CheckName.SETTINGS: Check(CheckName.SETTINGS, "Index Settings Check", "_settings", check_settings),
}

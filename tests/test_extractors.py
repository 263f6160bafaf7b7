from speedlog.measurements.extractors import (
    extract_download,
    extract_fields,
    extract_isp,
    extract_latency,
    extract_packet_loss,
    extract_result_url,
    extract_server,
    extract_upload,
)


def test_server_line():
    assert extract_server("Server: Acme Net, California (id = 4821)") == {
        "server": "Acme Net",
        "state": "California",
        "node_id": "4821",
    }


def test_server_line_with_colon_id_and_dash_in_name():
    fields = extract_server("     Server: Comcast - Chicago, IL (id: 1776)")
    assert fields == {"server": "Comcast - Chicago", "state": "IL", "node_id": "1776"}


def test_server_line_without_comma_keeps_name_and_id():
    assert extract_server("Server: Acme Net (id = 7)") == {"server": "Acme Net", "node_id": "7"}


def test_server_line_without_paren_drops_node_id():
    assert extract_server("Server: Acme Net, Texas") == {"server": "Acme Net", "state": "Texas"}


def test_marker_matching_is_case_insensitive_and_unanchored():
    assert extract_isp("   isp: Example Broadband  ") == {"isp": "Example Broadband"}


def test_non_matching_line_returns_none():
    assert extract_isp("Latency: 12.3 ms (jitter: 1.1 ms)") is None
    assert extract_server("Speedtest by Ookla") is None


def test_latency_line():
    assert extract_latency("Latency: 12.3 ms (jitter: 1.1 ms)") == {
        "latency": "12.3",
        "latency_unit": "ms",
        "jitter": "1.1",
        "jitter_unit": "ms",
    }


def test_idle_latency_line_with_unspaced_jitter():
    fields = extract_latency("    Idle Latency:    14.02 ms   (jitter: 0.42ms, low: 13.61ms, high: 14.53ms)")
    assert fields == {"latency": "14.02", "latency_unit": "ms", "jitter": "0.42", "jitter_unit": "ms"}


def test_latency_without_paren_loses_jitter():
    assert extract_latency("Latency: 12.3 ms") == {"latency": "12.3", "latency_unit": "ms"}


def test_unspaced_value_and_unit_are_split():
    assert extract_latency("Latency: 12.3ms (jitter: 1.1ms)") == {
        "latency": "12.3",
        "latency_unit": "ms",
        "jitter": "1.1",
        "jitter_unit": "ms",
    }


def test_value_without_unit_is_dropped():
    assert extract_latency("Latency: 12.3 (jitter: n/a)") == {}


def test_download_line():
    assert extract_download("Download: 95.4 Mbps (data used: 120.5 MB)") == {
        "down_speed": "95.4",
        "down_speed_unit": "Mbps",
        "down_size": "120.5",
        "down_size_unit": "MB",
    }


def test_upload_line():
    assert extract_upload("  Upload:    11.80 Mbps (data used: 14.2 MB)") == {
        "up_speed": "11.80",
        "up_speed_unit": "Mbps",
        "up_size": "14.2",
        "up_size_unit": "MB",
    }


def test_packet_loss_keeps_whole_value():
    assert extract_packet_loss("Packet Loss: Not available.") == {"packet_loss": "Not available."}


def test_result_url():
    line = "  Result URL: https://www.speedtest.net/result/c/abc"
    assert extract_result_url(line) == {"result_url": "https://www.speedtest.net/result/c/abc"}


def test_empty_remainder_yields_no_fields():
    assert extract_isp("ISP:") == {}


def test_extract_fields_merges_only_matching_markers():
    assert extract_fields("Download: 95.4 Mbps (data used: 120.5 MB)") == {
        "down_speed": "95.4",
        "down_speed_unit": "Mbps",
        "down_size": "120.5",
        "down_size_unit": "MB",
    }
    assert extract_fields("nothing to see") == {}

from datetime import datetime

import pytest

SAMPLE_REPORT = """
   Speedtest by Ookla

      Server: Acme Net, California (id = 4821)
         ISP: Example Broadband
     Latency: 12.3 ms (jitter: 1.1 ms)
    Download: 95.4 Mbps (data used: 120.5 MB)
      Upload: 11.8 Mbps (data used: 14.2 MB)
 Packet Loss: 0.0%
  Result URL: https://www.speedtest.net/result/c/0b1c2d3e-aaaa-bbbb-cccc-1234567890ab
"""


@pytest.fixture
def sample_report():
    return SAMPLE_REPORT


@pytest.fixture
def tick_time():
    return datetime(2024, 3, 7, 9, 5, 42)

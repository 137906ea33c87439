import sys, time, os

__all__ = ["type_out", "type_lines"]

# 1 = fast, 2 = normal, 3 = slow
SPEED_MAP = {1: 0.004, 2: 0.012, 3: 0.02}

def type_out(text: str, speed_setting: int = 2, stream=None):
    out = stream or sys.stdout
    delay = SPEED_MAP.get(speed_setting, 0.01)
    # No animation under pytest
    if os.getenv('PYTEST_CURRENT_TEST'):
        delay = 0
    for ch in text:
        out.write(ch)
        out.flush()
        if delay:
            time.sleep(delay)
    out.write("\n")

def type_lines(lines, speed_setting: int = 2, stream=None):
    for line in lines:
        type_out(line, speed_setting, stream)

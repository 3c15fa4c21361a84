# turtlepanel

A status panel and control client for an AFC (Automated Filament Changer)
unit on a Klipper printer driven through Moonraker.

It fetches the AFC lane state (which lanes are loaded, their LED colours,
the lane-to-tool mapping, hub and extruder status) and the bed and nozzle
temperatures, keeps a small queue of G-code commands to post to Moonraker,
and prints the status as text. It also contains a watchdog for background
jobs, decoders and drivers for the CST816S and AXS15231B touch controllers,
a backlight stepper, and a driver for the AXS15231B LCD controller. The
hardware drivers talk to bus and pin objects that you supply.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Command line

```
turtlepanel --host printer.local --api-url http://printer.local/your/afc/status/url
```

Options:

- `--host` (required) – Moonraker host name or address.
- `--api-url` – URL of the AFC status API. Without it only the printer
  information is fetched.
- `--interval` – seconds between updates (default 0.9).
- `--cycles` – stop after this many updates; 0 (the default) runs until
  interrupted with Ctrl-C.
- `--gcode` – a G-code command to send; may be given several times. The
  post queue holds at most five commands, and giving more is an error.
- `-v`, `--verbose` – log debug output.

Each cycle fetches the AFC status, checks that Klipper is ready and, if so,
reads the printer temperatures, sends the oldest queued G-code command, and
prints a block such as:

```
Tool: lane2
Hub: True
Nozzle: 215
Bed: 60
Lane1 T0 #ff0000
Lane2 T1 #00ff00
...
```

## Using it as a library

Talking to Moonraker and queueing G-code:

```python
import requests

from turtlepanel.moonraker import Moonraker
from turtlepanel import commands

client = Moonraker("printer.local", requests.Session())

client.http_get_loop()             # readiness, then printer info when ready
print(client.unready, client.data.bed_actual, client.data.nozzle_actual)

commands.load_tool(client, 2)      # queues "T2"
commands.eject_lane(client, 3)     # queues "BT_LANE_EJECT LANE=3"
client.http_post_loop()            # sends the oldest queued request
```

Queued commands are posted to `/printer/gcode/script?script=<gcode>`. Pushing
onto a full queue raises `PostQueueFull`. A failed GET sets
`client.unconnected`; the message of a 400 response is kept in
`client.last_error`.

Reading the AFC state from a status payload:

```python
from turtlepanel.afc_state import AfcState

state = AfcState()
state.apply_response(payload_text)
for lane in state.lanes[:4]:
    print(lane.lane, lane.load, lane.map_tool, hex(lane.led_color))
print(state.current_load_text, state.extruder_lane_loaded, state.loaded_to_hub)
```

Only the first unit in the AFC object is read, and of it the keys `lane1`
to `lane4`. A payload that is not valid JSON, or has no `result` object,
raises `ApiParseError`.

`StatusView.refresh(afc, printer)` in `turtlepanel.display` turns an
`AfcState` and a `PrinterData` into the label texts and slot colours the
panel shows.

`Watchdog(restart_api, restart_ui, restart_post)` in `turtlepanel.watchdog`
calls the restart callbacks from `check(last_post_update)`: the API job
every ten seconds, the UI job whenever no `heartbeat()` came since the last
check, and the post job when its last update is over ten seconds old.

## Hardware drivers

These classes take objects that provide the bus operations:

- `turtlepanel.touch.Cst816s(bus, reset_pin)` – `bus` needs
  `write(address, data)` and `read(address, length)`; a short read raises
  `OSError`. `decode_touch` and `decode_axs_touch` decode raw touch reports.
- `turtlepanel.backlight.Backlight(pin)` – `pin` needs `write(value)`;
  `set_level(level)` clamps to 0..16 and returns the number of pulses sent.
- `turtlepanel.panel.Axs15231b(bus)` – `bus` needs `select(active)`,
  `reset(level)` and `transmit(command, address, data, quad)`.

## What it does not do

- It has no graphical screen; the command prints its status as text.
- It does not set up Wi-Fi or serve a configuration or firmware upload page.
- It contains no bus implementations for real I2C, SPI or GPIO hardware.
- The command does not run the watchdog; `Watchdog` is for programs that
  run their own background jobs.

## Modules

- `turtlepanel.moonraker` – Moonraker HTTP client, printer data and post queue
- `turtlepanel.commands` – the AFC and toolchange G-code shortcuts
- `turtlepanel.afc_state` – parsing of the AFC status response
- `turtlepanel.display` – text and colour helpers and the status view
- `turtlepanel.watchdog` – restarts background jobs that stop reporting
- `turtlepanel.app` – the polling loop and the `turtlepanel` command
- `turtlepanel.touch` – CST816S driver and touch report decoding
- `turtlepanel.backlight` – pulse-step backlight level control
- `turtlepanel.panel` – AXS15231B command sequences and pixel pushing
# drycleansim

drycleansim is a discrete-event simulation of a dry-cleaning shop. Each arriving suit goes through these steps:

1. Server 1 splits the suit into a jacket and a pair of pants.
2. The jacket is cleaned at server 2 and the pants at server 3.
3. Server 4 puts the two parts back together.
4. A suit with a damaged part then goes on to server 5.

A jacket is damaged with probability 0.05 and a pair of pants with probability 0.10.

The model runs on a small general-purpose simulation engine, `drycleansim.simlib.Simlib`. The engine provides the following:

- an event calendar
- numbered lists
- sample statistics and time-average statistics
- random variates

The random numbers come from `drycleansim.lcgrand.LcgRandom`, a multiplicative congruential generator. By default it has 100 seeded streams.

## Installing

```
pip install .
```

The package has no runtime dependencies.

## Running the model

Write a parameter file that holds two numbers separated by whitespace: the mean interarrival time, then the length of the simulation, both in minutes.

```
10.0 480.0
```

Then run:

```
drycleansim
```

By default the command reads `input.txt` and writes the report to `output.txt`, both in the current directory. You can choose other files:

```
drycleansim --input params.txt --output report.txt
```

The short forms are `-i` and `-o`.

If the parameter file cannot be read or does not hold two numbers, the command prints an error to standard error and exits with status 1.

The report contains:

- the time spent in the system by undamaged suits (variable 1) and damaged suits (variable 2)
- the time-average and maximum length of each queue
- the utilisation of each server
- the number of suits accepted and the number of suits processed
- the time at which the simulation ended

## Using the model from Python

```python
from drycleansim.dryclean import DryCleaningModel, read_parameters
from drycleansim.lcgrand import LcgRandom

model = DryCleaningModel(mean_interarrival=10.0, sim_duration=480.0, rng=LcgRandom())
text = model.run()  # returns the report
print(text)
```

Notes on `DryCleaningModel`:

- `run()` can be called only once per model. A second call raises `RuntimeError`.
- `report()` returns the report for the statistics gathered so far.
- The number of suits that arrived is kept in `suits_accepted`.

`read_parameters(path)` reads the two parameters from a file. It raises `ValueError` if the file does not hold them.

## Using the engine on its own

`Simlib(max_attr=None, max_list=None, rng=None)` holds the clock (`sim_time`), the lists and the statistics. Records are lists of floats whose attributes are numbered from 1. `new_record()` returns a blank record.

Lists:

- `list_file(option, list_id, record)` files a copy of a record into a list. The `option` argument is one of `Option.FIRST`, `Option.LAST`, `Option.INCREASING` or `Option.DECREASING`.
- `list_remove(option, list_id)` removes the first or last record and returns it.
- `list_size(list_id)` returns the number of records in a list.
- `peek(list_id)` returns a copy of the first record, or `None` if the list is empty.

Event calendar (list 25):

- `event_schedule(time, event_type, record=None)` puts an event on the calendar.
- `timing()` removes the next event, advances `sim_time` to it and sets `next_event_type`. It returns the event's record.
- `event_cancel(event_type)` removes the first event of that type. It returns the event's record, or `None` if there is no such event.

Statistics:

- `sampst(value, variable)` records one observation of a discrete-time variable. `sampst_summary(variable)` returns a `SampleStats` with the fields `mean`, `count`, `maximum` and `minimum`.
- `timest(value, variable)` records a new level of a continuous-time variable. `timest_summary(variable)` returns a `TimeStats` with the fields `average`, `maximum` and `minimum`.
- `filest(list_id)` returns the length statistics of a list.
- `reset_sampst()` and `reset_timest()` clear the accumulators.
- `out_sampst`, `out_timest` and `out_filest` write tabular reports to a text stream.

Random variates:

- `expon(mean, stream)`
- `uniform(a, b, stream)`
- `erlang(m, mean, stream)`
- `random_integer(cumulative_probabilities, stream)`

Misuse of the engine raises `SimlibError`. Examples of misuse are an unknown list or option, removing from an empty list, and scheduling an event in the past.

`LcgRandom(seeds=None)` provides the following methods:

- `random(stream)`, which returns a value strictly between 0 and 1
- `set_seed(stream, seed)`
- `get_seed(stream)`

Runs that start from the same seeds are reproducible.

## Tests

```
pip install .[test]
pytest
```
# kthreads

The threading core of a small teaching kernel. One simulated CPU runs
cooperative threads: control passes only when a thread yields, sleeps or
finishes. A scheduler with ten priority levels (0 to 9, highest first, first
come first served within a level) picks the next thread to run.

## Building blocks

- `kthreads.kernel.Kernel` holds the shared state: `current_thread`,
  `scheduler` and `thread_to_be_destroyed`. Creating it makes the calling code
  the running thread named `main`. `run(next_thread)` dispatches the CPU.
  `shutdown()` drops all threads, and after it the kernel cannot run again.
- `kthreads.thread.Thread(kernel, name, joinable=False, priority=4)` is a
  thread. Start it with `fork(func, arg=None)`, which makes it run `func(arg)`.
  It offers `yield_cpu()`, `sleep()` and `finish(status=0)`.
  `set_priority(n)` works only on a thread that is not running, and
  `restore_original_priority()` puts back the priority the thread was created
  with. A joinable thread hands its exit status to a single `join()` call.
  `ThreadStatus` gives the life-cycle state.
  When no thread can run any more, the `main` thread gets `Halted`. If a
  forked thread raised an error, `main` gets that error instead.
- `kthreads.scheduler.Scheduler` holds the ready queues. Its methods are
  `ready_to_run`, `find_next_to_run`, `remove` and `describe`. You can iterate
  over it in scheduling order.
- `kthreads.semaphore.Semaphore(kernel, name, value)`: `p()` waits for a
  positive value and decrements it. `v()` increments it and wakes the
  longest-waiting thread.
- `kthreads.lock.Lock(kernel, name)`: a mutex that only its holder may
  release, and it also works as a `with` block. When a higher-priority thread
  asks for the lock, the holder's priority is raised to match. Releasing the
  lock restores the holder's original priority.
- `kthreads.condition.Condition(kernel, name, lock)`: a Mesa-style condition
  variable with `wait()`, `signal()` and `broadcast()`. Each of these must be
  called with the lock held.
- `kthreads.channel.Channel(kernel, name)`: a rendezvous. `send(message)`
  blocks until a receiver has taken the message, and `receive()` returns it.
- `kthreads.synch_list.SynchList(kernel)`: a FIFO list that one thread at a
  time may use. `pop()` waits while the list is empty, and `apply(func)` calls
  `func` on every item.

Misusing these primitives raises `RuntimeError` (for example, releasing a lock
you do not hold). A priority outside 0..9 raises `ValueError`.

```python
from kthreads.kernel import Kernel
from kthreads.thread import Thread

kernel = Kernel()
worker = Thread(kernel, "worker", joinable=True, priority=6)
worker.fork(lambda arg: print("hello from", arg), "worker")
print("exit status:", worker.join())
kernel.shutdown()
```

## The command

`kthreads` runs one of the built-in demonstrations on a fresh kernel:

```
kthreads -tt      # list the demonstrations and ask which one to run
kthreads -t3      # run demonstration number 3 directly
kthreads -z       # print "kthreads (0.1.0)" and exit
```

| #  | name         | what it shows                                   |
|----|--------------|-------------------------------------------------|
| 0  | `simple`     | four threads and `main` sharing a semaphore     |
| 1  | `garden`     | ornamental garden: two turnstiles, one counter  |
| 2  | `prodcons`   | producer/consumer over a three-slot buffer      |
| 3  | `gardenSem`  | ornamental garden guarded by a semaphore        |
| 4  | `channel`    | messages sent through a channel                 |
| 5  | `Join`       | joining a thread                                |
| 6  | `SchedulerS` | two priorities, no locks                        |
| 7  | `SchedulerP` | priority inheritance through a lock             |

At the `-tt` prompt you can answer with the number or the name.

Other options:

- `-d <flags>` turns on every debugging message, shown on standard error.
  Any non-empty value does this. `-d` given alone acts like `-d +`.
- `-do <options>` takes a comma-separated list. `location` (`l`) and
  `function` (`f`) add the source location and the function name to each
  message. After each message, `sleep` (`s`) pauses one second and
  `interactive` (`i`) waits for a line on standard input.
- `-rs <seed>` seeds Python's random number generator.

A bad option, or a test number with no demonstration, prints an error and
the command exits with status 2.

The demonstrations are also available as functions in `kthreads.demos`:
`run_simple`, `run_garden`, `run_garden_semaphore`, `run_prod_cons`,
`run_channel`, `run_join`, `run_scheduler_simple` and `run_scheduler_priority`.
Each takes a kernel, prints its progress and returns a summary. The summary is
a final count, the items or messages received, finishing order, or observed
priorities. `kthreads.cli` also has `parse_choice`, `choose`, `run_test`,
`parse_debug_opts` and `DebugOpts`.

## Smaller helpers

- `kthreads.commands.CommandManager` maps command names to handlers. It holds
  at most 20 of them. It splits a line on spaces and dispatches it, and the
  handler returns a `RunResult`: `STAY`, `STEP` or `NORMALIZE`.
- `kthreads.userlib` provides:
  - `itoa(n)`, which gives decimal text;
  - `prepare_arguments(line, max_args=32)`, which splits at every space and
    treats a leading `&` as a background command;
  - `read_line(stream, size=60)`, which reads one line without its newline.

## What it does not do

There is no timer and no preemption; threads switch only when they yield,
sleep or finish, and `-rs` does not add random yields. There is no support for
running user programs, no simulated memory, console or disk, no file system
and no interactive debugger. `CommandManager` is only the dispatcher such a
prompt would use.

## Installing

```
pip install .
pip install ".[test]"   # with the test suite
pytest
```
# zeroplug

The logic behind a set of group-chat bot features, with no bot framework attached. Each module covers one feature. You connect it to your own event handling and your own code for sending messages.

## Installation

From a checkout of the source:

```
pip install .
pip install ".[test]"   # also installs pytest
```

`zeroplug.midicreate.render_wav` runs the external `timidity` program, so `timidity` must be on `PATH` to use it.

## Modules

### `zeroplug.timer`

Reminders written in Chinese, for example "在12月每周的16点30分时提醒大家…".

- `get_filled_timer(date_strs, bot_id, group_id, match_date_only)` builds a `Timer` from the matched parts of such a command. It raises `ValueError` when the month, day, week, hour, minute or image URL is invalid.
- `get_filled_cron_timer(cron, alert, url, bot_id, group_id)` builds a `Timer` that runs on a cron expression.
- On a `Timer`:
  - `month()`, `day()`, `week()`, `hour()` and `minute()` read the packed schedule fields. `-1` means "every".
  - `enabled()` reports whether the timer is active.
  - `timer_info()` and `timer_id()` give a normalized description and an identifier derived from MD5.
  - `next_wake_time(now)` gives the next moment at which the timer should wake up and check whether it fires.
  - `should_fire(now)` reports whether an enabled timer matches `now`.
  - `message()` returns the message segments: an @all, the alert text, and the image if one is set.
- `chinese_num_to_int` and `chinese_char_to_int` read one- and two-digit Chinese numbers.
- `first_weekday` finds the first given weekday in a month.

### `zeroplug.clock`

- `CronSchedule(expr)` parses five-field cron expressions and `@daily`-style descriptors. It provides `matches(moment)` and `next_after(moment)`.
- `Clock(db_path, sender)` keeps timers in SQLite and runs each one on a background thread. When a timer fires, the clock calls `sender(timer)`.
- `Clock` methods:
  - `register_timer`, `cancel_timer` and `get_timer` add, stop and look up timers.
  - `list_timers(group_id)` lists the timers of one group in readable form.
  - `close()` stops every timer and closes the database.

### `zeroplug.heisi`

- `decode_item` turns a packed 10-byte record into a picture URL.
- `split_items` splits a data file into records.
- `PicturePool.from_files(folder)` loads the six data files.
- `PicturePool.random_url(command, rng)` picks a random picture for a command.

### `zeroplug.moyu`

- `Holiday.describe(now)` returns a countdown or status text for one holiday.
- `parse_holiday` and `format_holiday` read and write `days_year_month_day` records.
- `weekend_message` returns the text for the days left until the weekend.
- `build_reminder(now, holidays)` assembles the full daily reminder.

### `zeroplug.hyaku`

- `parse_poems` and `load_poems` read the Hyakunin Isshu CSV into 100 `Poem` objects. `str(poem)` gives the labelled text.
- `image_names(number)` gives the two picture file names for a poem.

### `zeroplug.webapis`

Builds requests and reads responses for two text services:

- the beast-speak encoder: `beast_url`, `beast_message`
- the "绝绝子" generator: `juejuezi_body`, `juejuezi_text`, `juejuezi_words`

### `zeroplug.managerstore`

- `ManagerStore(path)` keeps per-group welcome and farewell templates, and members verified through GitHub gists, in SQLite.
- `render_welcome` fills the `{at}`, `{nickname}`, `{avatar}`, `{uid}`, `{gid}` and `{groupname}` placeholders with CQ codes.
- `parse_join_answer` reads a `username/gisthash` join answer.
- `gist_url` builds the URL of the gist file to check.
- `check_new_user(store, qq, group_id, username, gist_hash, fetch, now)` checks the timestamp in that file. It accepts the join if the timestamp is within 600 seconds of `now`. You supply `fetch`, a function that takes a URL and returns the file content.

### `zeroplug.managertools`

- `ban_minutes` and `self_ban_minutes` convert a mute amount and unit to minutes, capped at 43199.
- `unescape_cq` undoes CQ escaping.
- `set_verify_flag` and `set_gist_flag` switch feature bits on or off.
- `pick_lucky` picks one of the ten members who spoke most recently.
- `format_essence` describes an essence-message entry.
- `check_card` and `check_title` raise `ValueError` when the text is too long in UTF-8 bytes.

### `zeroplug.moegoe`

- `parse_request` splits "让<speaker>说<text>" into speaker and text, and checks the text against the characters allowed for that speaker's language.
- `moegoe_url` builds the URL for the voice endpoint.

### `zeroplug.picstore`

- `PictureStore(path)` keeps picture URLs in SQLite, keyed by their CRC-64 (ISO polynomial), so a URL is stored only once. Methods: `add`, `contains`, `random`, `count`, `close`.
- `url_id` computes that key.
- `current_page` reads the page number from a page label.

### `zeroplug.midicreate`

- `make_midi(text, path, timbre)` writes note text such as `CCGGAAGR` to a MIDI file.
- `midi_to_text(data, track)` converts one track of a MIDI file back to note text.
- `render_wav` calls `timidity` to produce a WAV file.
- Ear-training helpers: `process_one`, `random_target`, `target_answer`, `round_score`, `check_timbre`, `note_name`, `octave`.

### `zeroplug.localsetu`

- `SetuIndex(db_path)` indexes local image folders into one SQLite table per folder. Each image is keyed by its 64-bit `difference_hash`.
- Methods: `scan_all`, `scan_class`, `classes`, `pick`, `count`, `summary`, `close`.

### `zeroplug.listening`

- `ListeningStore(path)` holds `ListeningItem` records.
- `random_by_category` and `random_by_keyword` return a random matching item, or `None` if nothing matches.

### `zeroplug.lolicon`

- `lolicon_image_url` reads the picture URL from an API response.
- `tag_url` builds a request URL for a tag.
- `image_name` strips a URL down to the file name.
- `ImageQueue` is a bounded prefetch queue. `get` raises `TimeoutError` when nothing arrives in time.

## Example

```python
from datetime import datetime
from zeroplug.timer import get_filled_timer

t = get_filled_timer(["", "12", "每周", "16", "30", "", "开会"], 0, 42, False)
print(t.timer_info())
print(t.next_wake_time(datetime.now()))
```

## What the package does not do

- It does not connect to any chat platform, listen for messages or send replies. It has no commands and no bot process. You supply the events and the code that sends messages.
- Apart from `check_new_user`, which calls the `fetch` function you pass in, it makes no network requests. The web-service helpers only build URLs and request bodies and read responses.
- It does not draw images, search or download music, or cut audio. The only outside program it starts is `timidity`, and only from `render_wav`.

## Running the tests

```
pytest
```
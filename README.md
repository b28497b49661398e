# starinvaders

An arcade space shooter. Enemies drop from the top of the screen in waves;
shoot them before they get past you or fly into you. Waves never end: after
the first three fixed waves, each new wave brings more enemies, spawned
faster, and from wave 6 on they also move quicker.

## Installing and running

```
pip install .
starinvaders
```

The game opens an 800×600 window and starts straight into wave 1. Options:

- `--assets DIR` – directory holding the images (default `pictures`). It is
  expected to contain `SpaceInvaders_Background.bmp`,
  `pico8_invaders_sprites_LARGE.png` and `shot.png`. An image that cannot be
  loaded is logged and simply not drawn.
- `--highscores FILE` – where the highscore table is kept (default
  `highscore.txt`).

## Controls

| Action             | Keyboard             | Joystick      |
|--------------------|----------------------|---------------|
| Move               | W A S D / arrow keys | left stick    |
| Shoot              | Space                | button 0      |
| Use a bomb         | E                    | button 1      |
| Confirm / restart  | Enter                |               |
| Delete a letter    | Backspace            |               |
| Quit (game over)   | Esc                  |               |

Holding E uses a bomb on every frame it stays pressed; the joystick button
uses one bomb per press. The ship is kept inside the window and below the
status line at the top.

## Enemies

Small enemies (red, yellow, pink, blue) take one hit, medium ones (gold,
dark green, silver) take two, and the large green one takes three. Bigger
enemies are worth more points. Every enemy that gets past the bottom of the
screen or touches your ship costs one of your three lives. A wave is over
once all of its enemies have been spawned and are gone; the next one starts
after a two-second pause.

## Power-ups

From wave 2 on, a destroyed enemy has a 10% chance to drop a power-up, at
most two per wave. Collect one by touching it:

- **Double shoot** – a quarter of the usual time between shots, for 5 seconds.
- **Heart** – one extra life (this can take you above three).
- **Speed** – 1.8 times faster movement, for 8 seconds.
- **Bomb** – stored for later; a bomb destroys every enemy on screen and
  scores them.
- **Multiplier** – points count double, for 10 seconds.

## Game over and highscores

When your last life is gone the game stops. If your score is above zero and
beats the lowest of the top five, you are asked for a name (letters, digits
and spaces, up to twenty characters). The table is saved as one `NAME SCORE`
line per entry. Press Enter to start again from wave 1, or Esc to quit.

## Using the pieces

The game is built from parts that can be used on their own, for example in
tests or other games:

- `starinvaders.entity` – `Rect`, the `Entity` base class and
  `EntityRegistry`, a bounded, ordered entity list.
- `starinvaders.health` – `Health` (lives, with an `on_death` callback) and
  `HealthDisplay`.
- `starinvaders.powerup` – `PowerupSystem`, `PowerupType` and
  `pick_random_type`.
- `starinvaders.enemy` – `EnemySystem` (enemies, waves and score), `Enemy`,
  `EnemyType`, `Wave`.
- `starinvaders.gameover` – `HighscoreTable` and `GameOverScreen`.
- `starinvaders.pew` – `Shot` and `cleanup_inactive_shots`.
- `starinvaders.player` – `Player`.
- `starinvaders.enemy_entity` – `EnemySystemEntity`, which drives the waves.
- `starinvaders.background` – `Background`.
- `starinvaders.app` – `App`, which ties them into the running game, and
  `main`, the command above.

Most parts take their clock, key state and random generator as arguments, so
they can be driven without a window.

## What it does not do

There is no title screen, menu or pause: the game begins as soon as the
window opens. There is no sound.

## Tests

```
pip install .[test]
pytest
```
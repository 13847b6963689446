"""Rules, move execution and move generation for FreeCell and Klondike."""

from checkers_engine.config import CONFIG, configure_logging
from checkers_engine.game import RESULT_TEXT, Game


def main():
    configure_logging(CONFIG)
    game = Game(CONFIG)
    result = game.play()

    if result is None:
        print("Game aborted")
        return
    game.board.print_board()
    print("Game Over")
    print(f"Result: {RESULT_TEXT[result]}")


if __name__ == "__main__":
    main()

from monkey.monkey_repl import run

run()

from chat_relay.server import main

main()

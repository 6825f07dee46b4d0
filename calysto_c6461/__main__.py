from .kernel import CalystoC6461

if __name__ == '__main__':
    CalystoC6461.run_as_main()
